"""Health check response schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class ReadinessSchema(Schema):
    status = fields.String(required=True)
    database = fields.String(required=True)
