# Supabase table: notifications
# This file documents the expected database schema
# Actual operations are handled via the ResourceStore in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- type: text (not null) - values: comment, upvote, assignment, ...
- title: text (not null)
- content: text (not null)
- source_url: text (nullable) - frontend path of the resource, e.g. /feature-requests/<id>
- recipient_id: uuid (foreign key to users.id, not null)
- sender_id: uuid (foreign key to users.id, nullable)
- is_read: boolean (not null, default: false)
- created_at: timestamp (default: now())
"""
