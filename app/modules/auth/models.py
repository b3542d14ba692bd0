# Supabase Auth
# Identity is delegated to Supabase's built-in authentication system.
# The only table this module writes is the public `users` profile row,
# provisioned once per identity (see AuthService.provision_profile).

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the caller from a JWT
- auth.sign_out() - Logout users

users (profile, keyed by the auth user id):
- id: uuid (primary key, equals auth.users.id)
- email: text
- display_name: text (default: 'User')
- avatar_url: text
- bio: text (nullable)
- last_active: timestamp
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
