# Supabase tables: feature_requests, feature_request_votes, feature_request_comments
# This file documents the expected database schema
# Actual operations are handled via the ResourceStore in service.py

"""
Expected Supabase table structure:

feature_requests:
- id: uuid (primary key)
- title: text (not null)
- description: text (not null)
- category: text (not null)
- status: text (not null, default: 'active') - values: active, in_progress, completed
- is_public: boolean (not null, default: true)
- creator_id: uuid (foreign key to users.id)
- upvotes: integer (not null, default: 0) - number of feature_request_votes rows
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

feature_request_votes:
- id: uuid (primary key)
- feature_request_id: uuid (foreign key to feature_requests.id, on delete cascade)
- user_id: uuid (foreign key to users.id)
- vote_type: smallint (always 1)
- unique constraint on (feature_request_id, user_id)

feature_request_comments:
- id: uuid (primary key)
- feature_request_id: uuid (foreign key to feature_requests.id, on delete cascade)
- user_id: uuid (foreign key to users.id)
- content: text (not null)
- created_at: timestamp (default: now())
"""
