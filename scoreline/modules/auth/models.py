# Authentication state lives on the users table (see modules/users/models.py)
# No separate tables are required:
# - password_hash: bcrypt hash, checked on login
# - email_verification_token / email_verified: set on register, cleared by /auth/verify-email
# - password_reset_token / password_reset_expires: set by /auth/forgot-password,
#   consumed by /auth/reset-password
#
# Access tokens are stateless HS256 JWTs signed with JWT_SECRET and carry
# user_id, email, name and role. The role in the token is informational only;
# request dependencies re-read the users row on every call.
