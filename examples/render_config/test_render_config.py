"""Tests for the render_config example."""

from tmpldeps.environment import terminal


class TestRenderConfigApp:
    """Verify rendering from a flat value store."""

    def test_output(self, example_app) -> None:
        assert example_app.output == (
            "app=BILLING\n"
            "db=svc@db.internal:5432\n"
            "feature=audit\n"
            "feature=export\n"
            "pidfile=/var/run/billing-server.pid\n"
        )

    def test_variables(self, example_app) -> None:
        assert example_app.template.required_variables() == [
            "database",
            "app_name",
            "features",
            "run_dir",
            "binary",
        ]

    def test_missing_database_reports_key(self, example_app) -> None:
        report = terminal.strip_colors(example_app.render_missing_database())
        assert "T-RUN-001: key database not found" in report
