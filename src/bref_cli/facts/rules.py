"""Extraction rules for the text printed by ``serverless info``.

Typical output::

    service: my-app
    stage: prod
    region: us-east-1
    stack: my-app-prod
    endpoints:
      ANY - https://abc123.execute-api.us-east-1.amazonaws.com/prod
"""

from __future__ import annotations

from .extractor import ExtractionRule

REGION = ExtractionRule.compile("region", r"^[ \t]*region:[ \t]*([A-Za-z0-9-]+)")
STAGE = ExtractionRule.compile("stage", r"^[ \t]*stage:[ \t]*(\S+)")
STACK = ExtractionRule.compile("stack", r"^[ \t]*stack:[ \t]*(\S+)", required=False)
API_ID = ExtractionRule.compile(
    "apiId",
    r"https://([A-Za-z0-9]+)\.execute-api\.[A-Za-z0-9-]+\.",
    required=False,
)

SERVERLESS_INFO_RULES = (REGION, STAGE, STACK, API_ID)
