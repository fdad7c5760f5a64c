"""Template sources and values shared by the benchmarks."""

# Small: one config file section
SMALL = """\
[server]
host = {{.host}}
port = {{getv "port" "8080"}}
"""

# Medium: realistic service config with blocks and structured values
MEDIUM = """\
{{- $db := json "database" -}}
[service]
name = {{getv "name" "svc"}}
{{if exists "tls_cert"}}
tls_cert = {{get "tls_cert"}}
tls_key = {{getv "tls_key" "/etc/ssl/private/key.pem"}}
{{end}}
[database]
dsn = {{$db.user}}@{{$db.host}}:{{$db.port}}
{{range $i, $h := jsonArray "replicas"}}
replica.{{$i}} = {{$h}}
{{else}}
replica.0 = {{getv "fallback_replica" "localhost"}}
{{end}}
{{with .logging}}level = {{.level}}{{end}}
"""

# Large: many independent sections
LARGE = MEDIUM * 25

# Deep: the innermost field sits just under the extraction ceiling
DEEP = "{{if .a}}" * 17 + "{{.leaf}}" + "{{end}}" * 17

MEDIUM_VALUES = {
    "name": "billing",
    "tls_cert": "/etc/ssl/cert.pem",
    "database": '{"user": "svc", "host": "db", "port": 5432}',
    "replicas": '["r1", "r2", "r3"]',
    "logging": {"level": "info"},
}

TEMPLATES = {"small": SMALL, "medium": MEDIUM, "large": LARGE, "deep": DEEP}
