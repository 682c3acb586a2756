"""Client management -- clients, their activity log, documents and checklists."""
