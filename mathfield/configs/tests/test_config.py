"""
Tests for editor configuration and logging setup.
"""

import logging

import pytest

from ..editor_config import EditorConfig
from ..logging_config import setup_logging


def test_config_from_dict():
    """Test camelCase and snake_case keys and rejected options."""
    print("\n" + "=" * 60)
    print("TEST: Config From Dict")
    print("=" * 60)

    config = EditorConfig.from_dict({"overrideDefaultInlineShortcuts": True,
                                     "inlineShortcuts": {"ee": r"\epsilon"},
                                     "wrap_around": False})
    assert config.override_default_inline_shortcuts
    assert config.inline_shortcuts == {"ee": r"\epsilon"}
    assert not config.wrap_around
    assert config.undo_max_depth == 1000

    with pytest.raises(ValueError):
        EditorConfig.from_dict({"smartFence": True})
    with pytest.raises(ValueError):
        EditorConfig.from_dict({"undoMaxDepth": 0})

    # Defaults are not shared between instances
    a, b = EditorConfig(), EditorConfig()
    a.inline_shortcuts["zz"] = "z"
    assert b.inline_shortcuts == {}
    print("  PASSED!")


def test_setup_logging(tmp_path):
    """Test handler replacement and the optional log file."""
    print("\n" + "=" * 60)
    print("TEST: Setup Logging")
    print("=" * 60)

    log_file = tmp_path / "logs" / "mathfield.log"
    logger = setup_logging("debug", log_file)
    assert logger.name == "mathfield"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    assert not logger.propagate

    logger.debug("parsed formula")
    for handler in logger.handlers:
        handler.flush()
    assert "parsed formula" in log_file.read_text(encoding="utf-8")

    logger = setup_logging(logging.WARNING)
    assert len(logger.handlers) == 1
    print("  PASSED!")


def run_all_tests():
    import tempfile
    from pathlib import Path

    print("\n" + "=" * 60)
    print("CONFIGURATION TEST SUITE")
    print("=" * 60)

    with tempfile.TemporaryDirectory() as tmp:
        tests = [
            test_config_from_dict,
            lambda: test_setup_logging(Path(tmp)),
        ]

        passed = 0
        failed = 0

        for test in tests:
            try:
                test()
                passed += 1
            except Exception as e:
                print(f"\n  FAILED: {e}")
                import traceback
                traceback.print_exc()
                failed += 1

    print("\n" + "=" * 60)
    print(f"RESULTS: {passed} passed, {failed} failed")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    exit(0 if success else 1)
