"""Test that all public modules can be imported."""

import pytest


class TestImports:
    """Test basic package imports."""

    def test_import_contactsurf(self):
        """Test main package import."""
        import contactsurf

        assert hasattr(contactsurf, "__version__")

    def test_import_config(self):
        """Test config module import."""
        from contactsurf.config import ContactSurfaceConfig, load_config

        assert ContactSurfaceConfig is not None
        assert load_config is not None

    def test_import_engine(self):
        """Test engine imports."""
        from contactsurf.engine import (
            ContactAreaEngine,
            DecompositionAggregator,
            WeightTable,
            classify,
            score,
            within,
        )

        assert ContactAreaEngine is not None
        assert DecompositionAggregator is not None
        assert WeightTable is not None
        assert classify is not None
        assert score is not None
        assert within is not None

    def test_lazy_attributes(self):
        """Top-level names resolve lazily."""
        import contactsurf

        assert contactsurf.ContactSurfaceAnalyzer.__name__ == "ContactSurfaceAnalyzer"
        assert contactsurf.FrameTableWriter.__name__ == "FrameTableWriter"

    def test_unknown_attribute(self):
        import contactsurf

        with pytest.raises(AttributeError):
            contactsurf.DoesNotExist

    def test_version_format(self):
        """Test version string format."""
        import contactsurf

        version = contactsurf.__version__
        parts = version.split(".")
        assert len(parts) >= 2, f"Version {version} should have at least major.minor"
        assert parts[0].isdigit(), f"Major version should be numeric: {parts[0]}"
        assert parts[1].isdigit(), f"Minor version should be numeric: {parts[1]}"

    def test_configuration_error_is_value_error(self):
        from contactsurf.exceptions import ConfigurationError, ContactSurfaceError

        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(ConfigurationError, ContactSurfaceError)


class TestLogging:
    """Root logger configuration used by the CLI."""

    def test_levels(self):
        import logging

        from contactsurf.core.logging_utils import setup_logging

        setup_logging(quiet=True)
        assert logging.root.level == logging.WARNING
        setup_logging(debug=True, quiet=True)
        assert logging.root.level == logging.DEBUG
        setup_logging()
        assert logging.root.level == logging.INFO
        assert len(logging.root.handlers) == 1
        assert logging.getLogger("MDAnalysis").level == logging.WARNING

    def test_plain_output_when_not_a_tty(self):
        import logging

        from contactsurf.core.logging_utils import ColoredFormatter

        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "careful", None, None)
        assert ColoredFormatter("%(message)s").format(record) == "careful"
