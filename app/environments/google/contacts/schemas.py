"""
Google Contacts Schemas - People API connections in this system's shape.

Reference: https://developers.google.com/people/api/rest/v1/people.connections/list
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Contact(BaseModel):
    """
    One of the user's Google contacts, flattened to primary values.

    Serialized with camelCase keys (googleContactId, photoUrl, ...).
    """
    model_config = ConfigDict(populate_by_name=True)

    google_contact_id: str = Field(..., alias="googleContactId", description="People API resourceName")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoUrl")
    company: Optional[str] = None
    job_title: Optional[str] = Field(None, alias="jobTitle")
    notes: Optional[str] = None

    @classmethod
    def from_person(cls, person: Dict[str, Any]) -> "Contact":
        """
        Build a Contact from a People API person resource.

        Each multi-valued field contributes its first entry.
        """
        def first(field: str) -> Dict[str, Any]:
            values = person.get(field) or []
            return values[0] if values else {}

        organization = first("organizations")
        return cls(
            google_contact_id=person.get("resourceName", ""),
            name=first("names").get("displayName"),
            email=first("emailAddresses").get("value"),
            phone=first("phoneNumbers").get("value"),
            photo_url=first("photos").get("url"),
            company=organization.get("name"),
            job_title=organization.get("title"),
            notes=first("biographies").get("value"),
        )


class ContactsPage(BaseModel):
    """A page of contacts plus the token for the next page."""
    model_config = ConfigDict(populate_by_name=True)

    contacts: List[Contact] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")
    total: Optional[int] = Field(None, description="totalPeople reported by Google")
