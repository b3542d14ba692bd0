# Supabase tables: checklists, checklist_items
# This file documents the expected database schema
# Actual operations are handled via the ResourceStore in service.py

"""
Expected Supabase table structure:

checklists:
- id: uuid (primary key)
- idea_id: uuid (foreign key to ideas.id, on delete cascade)
- creator_id: uuid (foreign key to users.id)
- title: text (not null)
- is_shared: boolean (not null, default: false) - shared checklists are worked on by every idea member
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

checklist_items:
- id: uuid (primary key)
- checklist_id: uuid (foreign key to checklists.id, on delete cascade)
- text: text (not null)
- completed: boolean (not null, default: false)
- position: integer (not null, default: 0)
- created_by: uuid (foreign key to users.id)
- completed_by: uuid (foreign key to users.id, nullable) - set iff completed
- completed_at: timestamp (nullable) - set iff completed
- created_at: timestamp (default: now())

Progress is never stored; it is derived from the items on every read.
"""
