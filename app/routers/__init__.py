"""
Routers module - API endpoint handlers organized by feature.

- auth: Google sign-in, logout, disconnect, account deletion
- users: Profile and notification preferences
- google: Read-only proxies to Contacts, Gmail, Drive and Photos
- notes: Note CRUD
- reminders: Reminder CRUD
"""
