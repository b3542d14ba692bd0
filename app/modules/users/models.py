# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via the ResourceStore in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, equals the Supabase Auth user id)
- email: text (default: '')
- display_name: text (not null, default: 'User')
- avatar_url: text (default: '')
- bio: text (nullable)
- is_online: boolean (default: false)
- last_active: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Rows are provisioned by the auth module on first sight of an identity.
"""
