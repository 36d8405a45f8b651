# Routes package init
"""
FolderNotes Backend — API Routes Package
=========================================

Route Inventory:
    - folders.py: GET/POST /api/folders, DELETE /api/folders/{id}
    - notes.py:   /api/notes CRUD, /api/folders/{id}/notes,
                  /api/notes/{id}/files attachment endpoints
    - health.py:  GET /health

Routes stay thin: extract request data, call a service, return its result.
"""
