"""Render config -- fill a template from a flat value store.

Values arrive as a flat mapping of strings, the way a key/value store
hands them out. Structured values are JSON strings decoded inside the
template with ``json`` and ``jsonArray``. The utility variant adds string
and path helpers.

Run:
    python app.py
"""

from tmpldeps import BuildVariant, Environment, KeyNotFoundError, create_registry

SOURCE = """\
{{- $db := json "database" -}}
app={{toUpper (getv "app_name" "demo")}}
db={{$db.user}}@{{$db.host}}:{{$db.port}}
{{range jsonArray "features" -}}
feature={{.}}
{{end -}}
pidfile={{getv "run_dir" "/var/run"}}/{{base (getv "binary" "/usr/bin/demo")}}.pid
"""

VALUES = {
    "app_name": "billing",
    "database": '{"user": "svc", "host": "db.internal", "port": 5432}',
    "features": '["audit", "export"]',
    "binary": "/opt/billing/bin/billing-server",
}

env = Environment(variant=BuildVariant.UTILITY)
env.register_function(create_registry(BuildVariant.ACCESSOR)["getv"])
template = env.from_string(SOURCE, name="billing.conf.tmpl")

output = template.render(VALUES)


def render_missing_database() -> str:
    """Render without the database entry to show the error report."""
    values = {k: v for k, v in VALUES.items() if k != "database"}
    try:
        return template.render(values)
    except KeyNotFoundError as exc:
        return exc.format_compact()


def main() -> None:
    print(output)
    print(render_missing_database())


if __name__ == "__main__":
    main()
