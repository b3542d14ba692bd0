# Supabase tables: ideas, idea_assignments, idea_votes, comments
# This file documents the expected database schema
# Actual operations are handled via the ResourceStore in service.py

"""
Expected Supabase table structure:

ideas:
- id: uuid (primary key)
- title: text (not null)
- description: text (default: '')
- creator_id: uuid (foreign key to users.id, not null)
- status: text (not null, default: 'draft') - values: draft, in_progress, completed, archived
- is_published: boolean (not null, default: false) - published ideas are readable by anyone
- published_at: timestamp (nullable) - set once, on first publish
- upvotes: integer (not null, default: 0) - signed sum of idea_votes.vote_type
- tags: text[] (default: '{}')
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

idea_assignments (membership):
- id: uuid (primary key)
- idea_id: uuid (foreign key to ideas.id, on delete cascade)
- user_id: uuid (foreign key to users.id)
- status: text (default: 'in_progress')
- assigned_at: timestamp (default: now())
- unique constraint on (idea_id, user_id)

idea_votes:
- id: uuid (primary key)
- idea_id: uuid (foreign key to ideas.id, on delete cascade)
- user_id: uuid (foreign key to users.id)
- vote_type: smallint (not null, check vote_type in (1, -1))
- created_at: timestamp (default: now())
- unique constraint on (idea_id, user_id)

comments:
- id: uuid (primary key)
- idea_id: uuid (foreign key to ideas.id, on delete cascade)
- user_id: uuid (foreign key to users.id)
- content: text (not null)
- parent_id: uuid (foreign key to comments.id, nullable) - threaded replies
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
