"""Tests for the extract_variables example."""


class TestExtractVariablesApp:
    """Verify dependency listing for the server template."""

    def test_reads_in_source_order(self, example_app) -> None:
        assert example_app.names == [
            "host",
            "port",
            "tls_cert",
            "tls_cert",
            "upstreams",
            "log_level",
            "host",
        ]

    def test_required_is_distinct(self, example_app) -> None:
        assert example_app.required == ["host", "port", "tls_cert", "upstreams", "log_level"]

    def test_defaults(self, example_app) -> None:
        assert example_app.defaults == {"port": "8080", "log_level": "info"}

    def test_main_prints_summary(self, example_app, capsys) -> None:
        example_app.main()
        out = capsys.readouterr().out
        assert "Distinct inputs: host, port, tls_cert, upstreams, log_level" in out
