"""
Configuration for the auth module.

Cookie names are fixed; the signing secret comes from `shortener.config`
(SECRET_URL_SERVICE) and is passed in when the middleware is installed.
"""

USER_ID_COOKIE = "user_id"
SIGNATURE_COOKIE = "signature"
COOKIE_PATH = "/"
