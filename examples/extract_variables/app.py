"""Extract variables -- list the inputs a config template needs.

Parses a template without rendering it and reports every value it reads:
field references, accessor keys and their literal defaults.

Run:
    python app.py
"""

from tmpldeps import Environment

SOURCE = """\
[server]
host = {{.host}}
port = {{getv "port" "8080"}}
{{if exists "tls_cert"}}
cert = {{get "tls_cert"}}
{{end}}
{{range $i, $u := jsonArray "upstreams"}}
upstream.{{$i}} = {{$u}}
{{end}}
log_level = {{getv "log_level" "info"}}
banner = {{.host}}
"""

env = Environment()

names = env.extract_names(SOURCE)
required = env.from_string(SOURCE, name="server.conf.tmpl").required_variables()
with_defaults = env.extract_with_defaults(SOURCE)
defaults = {info.name: info.default_value for info in with_defaults if info.default_value}


def main() -> None:
    print("Every read, in order:")
    for name in names:
        print(f"  {name}")
    print()
    print("Distinct inputs:", ", ".join(required))
    print("Defaults:", defaults)


if __name__ == "__main__":
    main()
