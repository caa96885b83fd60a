"""Project templates written by ``bref init``.

Each template maps a relative file path to its contents.
"""

# ============================================================================
# Shared fragments
# ============================================================================

_SERVERLESS_HEADER = """service: app

provider:
    name: aws
    region: us-east-1

plugins:
    - ./vendor/bref/bref

"""

_PACKAGE_SECTION = """
# Exclude files from deployment
package:
    patterns:
        - '!node_modules/**'
        - '!tests/**'
"""

# ============================================================================
# HTTP application (PHP-FPM)
# ============================================================================

WEB_TEMPLATE = {
    "serverless.yml": _SERVERLESS_HEADER + """functions:
    api:
        handler: index.php
        description: ''
        runtime: php-83-fpm
        timeout: 28 # in seconds (API Gateway has a timeout of 29 seconds)
        events:
            -   httpApi: '*'
""" + _PACKAGE_SECTION,
    "index.php": """<?php

echo 'Hello world!';
""",
}

# ============================================================================
# Event-driven function
# ============================================================================

EVENT_TEMPLATE = {
    "serverless.yml": _SERVERLESS_HEADER + """functions:
    function:
        handler: index.php
        runtime: php-83
""" + _PACKAGE_SECTION,
    "index.php": """<?php declare(strict_types=1);

require __DIR__ . '/vendor/autoload.php';

return function ($event) {
    return 'Hello ' . ($event['name'] ?? 'world');
};
""",
}

# ============================================================================
# Console application
# ============================================================================

CONSOLE_TEMPLATE = {
    "serverless.yml": _SERVERLESS_HEADER + """functions:
    console:
        handler: index.php
        runtime: php-83-console
        timeout: 120
""" + _PACKAGE_SECTION,
    "index.php": """<?php declare(strict_types=1);

require __DIR__ . '/vendor/autoload.php';

echo 'Hello ' . ($argv[1] ?? 'world') . PHP_EOL;
""",
}

TEMPLATES = {
    "web": WEB_TEMPLATE,
    "event": EVENT_TEMPLATE,
    "console": CONSOLE_TEMPLATE,
}

TEMPLATE_DESCRIPTIONS = {
    "web": "Web application (HTTP, PHP-FPM)",
    "event": "Event-driven function",
    "console": "Console application",
}
