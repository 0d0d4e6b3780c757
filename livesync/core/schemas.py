"""Shapes of the normalized workspace entities.

Entities mirror the OpenAPI objects they come from, with two differences:
cross references are uid lists, and an OAuth2 security scheme holds a single
``flow`` (tagged with its ``type``) instead of the ``flows`` map.
"""

from __future__ import annotations

import uuid

from .shapes import (
    ANY,
    BOOLEAN,
    STRING,
    array,
    default,
    enum,
    literal,
    obj,
    optional,
    record,
    union,
)

HTTP_METHODS = (
    "get",
    "put",
    "post",
    "delete",
    "options",
    "head",
    "patch",
    "trace",
    "connect",
)

OAUTH_FLOW_TYPES = ("implicit", "password", "clientCredentials", "authorizationCode")


def new_uid() -> str:
    return uuid.uuid4().hex


def is_http_method(value: object) -> bool:
    return isinstance(value, str) and value.lower() in HTTP_METHODS


UID = default(STRING, factory=new_uid)
UID_LIST = default(array(STRING), [])


EXTERNAL_DOCS = obj(
    "external docs",
    {
        "description": optional(STRING),
        "url": STRING,
    },
)

# Security requirement: scheme name -> scopes
SECURITY_REQUIREMENT = record(array(STRING))


# =============================================================================
# Collection
# =============================================================================

CONTACT = obj(
    "contact",
    {
        "name": optional(STRING),
        "url": optional(STRING),
        "email": optional(STRING),
    },
)

LICENSE = obj(
    "license",
    {
        "name": optional(STRING),
        "identifier": optional(STRING),
        "url": optional(STRING),
    },
)

INFO = obj(
    "info",
    {
        "title": default(STRING, "API"),
        "summary": optional(STRING),
        "description": optional(STRING),
        "termsOfService": optional(STRING),
        "contact": optional(CONTACT),
        "license": optional(LICENSE),
        "version": default(STRING, "1.0"),
    },
)

COLLECTION = obj(
    "collection",
    {
        "type": default(literal("collection"), "collection"),
        "uid": UID,
        "openapi": default(STRING, "3.1.0"),
        "jsonSchemaDialect": optional(STRING),
        "info": default(INFO, {}),
        "security": default(array(SECURITY_REQUIREMENT), []),
        "externalDocs": optional(EXTERNAL_DOCS),
        "components": optional(record(ANY)),
        "webhooks": optional(record(ANY)),
        "documentUrl": optional(STRING),
        "liveSync": default(BOOLEAN, False),
        "securitySchemes": UID_LIST,
        "selectedSecuritySchemeUids": UID_LIST,
        "servers": UID_LIST,
        "requests": UID_LIST,
        "tags": UID_LIST,
    },
)


# =============================================================================
# Request
# =============================================================================

PARAMETER = obj(
    "parameter",
    {
        "in": enum("path", "query", "header", "cookie"),
        "name": STRING,
        "description": optional(STRING),
        "required": optional(BOOLEAN),
        "deprecated": optional(BOOLEAN),
        "schema": optional(ANY),
        "content": optional(ANY),
        "style": optional(STRING),
        "explode": optional(BOOLEAN),
        "example": optional(ANY),
        "examples": optional(record(ANY)),
    },
)

REQUEST = obj(
    "request",
    {
        "type": default(literal("request"), "request"),
        "uid": UID,
        "path": default(STRING, ""),
        "method": default(enum(*HTTP_METHODS), "get"),
        "servers": UID_LIST,
        "examples": UID_LIST,
        "selectedSecuritySchemeUids": UID_LIST,
        "tags": optional(array(STRING)),
        "summary": optional(STRING),
        "description": optional(STRING),
        "operationId": optional(STRING),
        "security": optional(array(SECURITY_REQUIREMENT)),
        "requestBody": optional(ANY),
        "parameters": optional(array(PARAMETER)),
        "externalDocs": optional(EXTERNAL_DOCS),
        "deprecated": optional(BOOLEAN),
        "responses": optional(record(ANY)),
        "callbacks": optional(record(ANY)),
    },
)


# =============================================================================
# Server and tag
# =============================================================================

SERVER_VARIABLE = obj(
    "server variable",
    {
        "enum": optional(array(STRING)),
        "default": optional(STRING),
        "description": optional(STRING),
        "value": optional(STRING),
    },
)

SERVER = obj(
    "server",
    {
        "uid": UID,
        "url": STRING,
        "description": optional(STRING),
        "variables": optional(record(SERVER_VARIABLE)),
    },
)

TAG = obj(
    "tag",
    {
        "type": default(literal("tag"), "tag"),
        "uid": UID,
        "name": STRING,
        "description": optional(STRING),
        "externalDocs": optional(EXTERNAL_DOCS),
        "children": UID_LIST,
    },
)


# =============================================================================
# Security schemes
# =============================================================================

# Scopes are either a keyed map or an empty object, path resolution cannot
# descend into them
SCOPES = default(union(record(optional(STRING)), obj("empty scopes", {})), {})

_FLOW_COMMON = {
    "refreshUrl": optional(STRING),
    "scopes": SCOPES,
    "selectedScopes": default(array(STRING), []),
    "token": default(STRING, ""),
}

IMPLICIT_FLOW = obj(
    "implicit flow",
    {
        "type": literal("implicit"),
        "authorizationUrl": default(STRING, ""),
        **_FLOW_COMMON,
    },
)

PASSWORD_FLOW = obj(
    "password flow",
    {
        "type": literal("password"),
        "tokenUrl": default(STRING, ""),
        "username": default(STRING, ""),
        "password": default(STRING, ""),
        "clientSecret": default(STRING, ""),
        **_FLOW_COMMON,
    },
)

CLIENT_CREDENTIALS_FLOW = obj(
    "client credentials flow",
    {
        "type": literal("clientCredentials"),
        "tokenUrl": default(STRING, ""),
        "clientSecret": default(STRING, ""),
        **_FLOW_COMMON,
    },
)

AUTHORIZATION_CODE_FLOW = obj(
    "authorization code flow",
    {
        "type": literal("authorizationCode"),
        "authorizationUrl": default(STRING, ""),
        "tokenUrl": default(STRING, ""),
        "clientSecret": default(STRING, ""),
        "x-usePkce": default(enum("SHA-256", "plain", "no"), "no"),
        **_FLOW_COMMON,
    },
)

OAUTH_FLOW = union(
    IMPLICIT_FLOW,
    PASSWORD_FLOW,
    CLIENT_CREDENTIALS_FLOW,
    AUTHORIZATION_CODE_FLOW,
    discriminator="type",
)

_SCHEME_COMMON = {
    "uid": UID,
    "nameKey": default(STRING, "default"),
    "description": optional(STRING),
}

API_KEY_SCHEME = obj(
    "api key scheme",
    {
        "type": literal("apiKey"),
        **_SCHEME_COMMON,
        "name": default(STRING, ""),
        "in": default(enum("query", "header", "cookie"), "header"),
        "value": default(STRING, ""),
    },
)

HTTP_SCHEME = obj(
    "http scheme",
    {
        "type": literal("http"),
        **_SCHEME_COMMON,
        "scheme": default(STRING, "basic"),
        "bearerFormat": default(STRING, "JWT"),
        "username": default(STRING, ""),
        "password": default(STRING, ""),
        "token": default(STRING, ""),
    },
)

OPEN_ID_CONNECT_SCHEME = obj(
    "open id connect scheme",
    {
        "type": literal("openIdConnect"),
        **_SCHEME_COMMON,
        "openIdConnectUrl": default(STRING, ""),
    },
)

OAUTH2_SCHEME = obj(
    "oauth2 scheme",
    {
        "type": literal("oauth2"),
        **_SCHEME_COMMON,
        "flow": default(OAUTH_FLOW, {"type": "implicit"}),
        "x-scalar-client-id": default(STRING, ""),
    },
)

SECURITY_SCHEME = union(
    API_KEY_SCHEME,
    HTTP_SCHEME,
    OPEN_ID_CONNECT_SCHEME,
    OAUTH2_SCHEME,
    discriminator="type",
)
