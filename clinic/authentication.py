"""
Token authentication for the API.

Kept in its own module so that Django REST framework can import the
authentication class during initialisation without pulling in any views.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword.

    Exists to give the project's configuration a stable import path.
    """

    keyword = 'Token'
