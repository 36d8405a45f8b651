# Services package init
"""
FolderNotes Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the store (persistence).
How:   Services take the request's AsyncSession, apply the folder/note rules,
       and return Pydantic response models.

Service Inventory:
    - FolderService: list/create/delete folders, delete cascade
    - NoteService: note CRUD plus attachment add/remove
    - ensure_default_folder: one-time startup bootstrap

Services hold no state of their own, so module-level singletons are shared
by all requests.
"""
