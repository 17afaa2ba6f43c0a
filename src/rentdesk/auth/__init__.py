"""Credentials and sessions.

Learn: Everything that decides "who is making this request" lives here:
1. password — bcrypt hashing and verification
2. store — account lookup and uniqueness enforcement
3. jwt — stateless bearer tokens (issue + verify)
4. dependencies — the per-request gate that resolves a token to an Account

Registration and login establish identity and therefore bypass the gate;
every other protected route depends on it.
"""
