"""Application exceptions and backend error translation.

Failures from Supabase (PostgREST and GoTrue) reach us as plain messages.
The few that operators keep hitting while setting up a project are
rewritten into longer remediation text before they are shown to anyone.
"""

from __future__ import annotations

import re


class SkillSpotError(Exception):
    """Base exception for all SkillSpot errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


class ConfigurationError(SkillSpotError):
    """Raised when the service or the backing project is misconfigured."""

    status_code = 503


class NotFoundError(SkillSpotError):
    """Raised when a requested record does not exist."""

    status_code = 404

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} '{key}' not found")


class ConflictError(SkillSpotError):
    """Raised when a write would duplicate an existing record."""

    status_code = 409


class PermissionDeniedError(SkillSpotError):
    """Raised when the current user's role does not allow an action."""

    status_code = 403


class AuthenticationError(SkillSpotError):
    """Raised when a session cannot be resolved to a usable profile."""

    status_code = 401


class ValidationError(SkillSpotError):
    """Raised when form input fails validation."""

    status_code = 422


class DataServiceError(SkillSpotError):
    """Raised when the remote data service rejects or fails a call."""

    status_code = 502


# ---------------------------------------------------------------------------
# Backend error translation
# ---------------------------------------------------------------------------

RLS_READ_MESSAGE = """Database Security Error: The application cannot read data from your database.

This typically means you have enabled Row Level Security (RLS) on your tables (e.g., 'ngos', 'users') but have not created policies to allow read ('SELECT') access for anonymous or authenticated users.

To fix this, please go to your Supabase project's SQL Editor and ensure you have 'SELECT' policies for all tables. For example, to make NGOs public, run:

CREATE POLICY "Allow public read access to NGOs" ON public.ngos FOR SELECT USING (true);"""

RLS_WRITE_MESSAGE = """Database Security Error: The application is not allowed to write to table '{table}'.

Row Level Security (RLS) is enabled on this table but no policy allows this write ('INSERT' / 'UPDATE' / 'DELETE').

Open your Supabase project's SQL Editor and add a policy for the operation, for example:

CREATE POLICY "Allow authenticated inserts" ON public.{table} FOR INSERT TO authenticated WITH CHECK (true);"""

RLS_USER_INSERT_MESSAGE = """Sign-in Configuration Error: Your account was authenticated, but your user profile could not be created.

The 'users' table has Row Level Security enabled without a policy that lets a newly signed-in user insert their own profile row.

Run the following in your Supabase project's SQL Editor, then sign in again:

CREATE POLICY "Users can insert their own profile" ON public.users FOR INSERT WITH CHECK (auth.uid() = id);"""

MISSING_COLUMN_MESSAGE = """Database Schema Error: The column '{column}' is missing from your database.

The application expects the tables 'ngos', 'users', 'enrollments' and 'notifications' to use the column names of the SkillSpot schema (for example "ngoId", "enrollmentId", "isRead"). Column names are case-sensitive; quote camelCase names when creating them.

Add the missing column in the Supabase Table Editor or re-run the schema script, then reload."""

SIGNUPS_DISABLED_MESSAGE = """Authentication Configuration Error: This sign-up method is disabled for your Supabase project.

Go to Authentication > Providers in the Supabase dashboard and enable the provider you are trying to use (Email, or the external provider for social sign-in). For email sign-up also check that "Allow new users to sign up" is turned on.

Original error: {detail}"""

_RLS_RE = re.compile(r"violates row[- ]level security policy(?: for table \"?(?P<table>\w+)\"?)?", re.I)
_MISSING_COLUMN_RES = (
    re.compile(r"column \"?(?:\w+\.)?(?P<column>[\w]+)\"? (?:of relation \"?\w+\"? )?does not exist", re.I),
    re.compile(r"Could not find the '(?P<column>[^']+)' column", re.I),
)
_SIGNUPS_DISABLED_RE = re.compile(
    r"signups? not allowed|signups? (?:are|is) disabled|provider is not enabled|unsupported provider",
    re.I,
)


def error_message(err: BaseException | str) -> str:
    """Best-effort plain message for exceptions from supabase / postgrest / gotrue."""
    if isinstance(err, str):
        return err
    msg = getattr(err, "message", None)
    if isinstance(msg, str) and msg:
        return msg
    return str(err) or repr(err)


def translate_backend_error(err: BaseException | str, *, reading: bool = True) -> str:
    """Replace known backend failure strings with operator-facing remediation text."""
    detail = error_message(err)

    m = _RLS_RE.search(detail)
    if m:
        if reading:
            return RLS_READ_MESSAGE
        return RLS_WRITE_MESSAGE.format(table=m.group("table") or "<table>")

    for rx in _MISSING_COLUMN_RES:
        m = rx.search(detail)
        if m:
            return MISSING_COLUMN_MESSAGE.format(column=m.group("column"))

    if _SIGNUPS_DISABLED_RE.search(detail):
        return SIGNUPS_DISABLED_MESSAGE.format(detail=detail)

    return detail
