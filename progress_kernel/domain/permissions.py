"""Page permission codes the console checks before offering an action.

The backend enforces the same permissions; the local check only decides
which affordances to show and fails fast with AuthorizationDeniedError.
"""

PAGE_CONFIRMATION_EDIT = "PAGE_CONFIRMATION_EDIT"
PAGE_CONFIRMATION_ADMIN = "PAGE_CONFIRMATION_ADMIN"
