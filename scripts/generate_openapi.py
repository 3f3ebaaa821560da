"""
Write the PlayGram OpenAPI schema to a JSON file.

The gateway mounts every service router, so its schema already covers the
whole API. The output feeds the TypeScript type generation in the apps.

Usage:
    python -m scripts.generate_openapi [output.json]
"""

import json
import sys

from services.gateway_service.app.main import app


def main() -> None:
    output = sys.argv[1] if len(sys.argv) > 1 else "openapi.json"
    schema = app.openapi()
    with open(output, "w") as f:
        json.dump(schema, f, indent=2)
    print(f"✅ Wrote {len(schema.get('paths', {}))} paths to {output}")


if __name__ == "__main__":
    main()
