# Supabase tables: posts, post_votes, post_comments
# This file documents the expected database schema
# Actual operations are handled via the ResourceStore in service.py

"""
Expected Supabase table structure:

posts:
- id: uuid (primary key)
- title: text (not null)
- description: text (default: '')
- content: text (default: '')
- is_public: boolean (not null, default: true)
- creator_id: uuid (foreign key to users.id)
- upvotes: integer (not null, default: 0) - signed sum of post_votes.vote_type
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

post_votes:
- id: uuid (primary key)
- post_id: uuid (foreign key to posts.id, on delete cascade)
- user_id: uuid (foreign key to users.id)
- vote_type: smallint (check vote_type in (1, -1))
- unique constraint on (post_id, user_id)

post_comments:
- id: uuid (primary key)
- post_id: uuid (foreign key to posts.id, on delete cascade)
- user_id: uuid (foreign key to users.id)
- content: text (not null)
- created_at: timestamp (default: now())
"""
