"""
Tests for persistence — optional-group record.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from provisioner.core.persistence.group_record import (
    default_record_path,
    read_group_record,
    write_group_record,
)


class TestGroupRecord:
    """Tests for the uv-groups.selected record."""

    def test_default_path(self, tmp_path: Path):
        path = default_record_path(tmp_path)
        assert path == tmp_path / ".tiangong" / "uv-groups.selected"

    def test_write_and_read(self, tmp_path: Path):
        """Record roundtrips through write/read."""
        path = default_record_path(tmp_path)
        write_group_record(["3rd"], path)
        assert path.read_text() == "3rd\n"
        assert read_group_record(path) == ["3rd"]

    def test_sorted_and_unique(self, tmp_path: Path):
        """Duplicate selections collapse; order is sorted."""
        path = tmp_path / "record"
        written = write_group_record(["viz", "3rd", "viz", " ", "3rd"], path)
        assert written == ["3rd", "viz"]
        assert path.read_text().splitlines() == ["3rd", "viz"]

    def test_creates_directories(self, tmp_path: Path):
        path = tmp_path / "deep" / "nested" / "record"
        write_group_record(["3rd"], path)
        assert path.is_file()

    def test_overwrites_previous(self, tmp_path: Path):
        path = tmp_path / "record"
        write_group_record(["a", "b"], path)
        write_group_record(["c"], path)
        assert read_group_record(path) == ["c"]

    def test_missing_returns_empty(self, tmp_path: Path):
        assert read_group_record(tmp_path / "nonexistent") == []

    def test_no_temp_files_left(self, tmp_path: Path):
        """Atomic write leaves only the record behind."""
        path = tmp_path / "record"
        write_group_record(["3rd"], path)
        assert [p.name for p in tmp_path.iterdir()] == ["record"]

    def test_failed_write_cleans_up(self, tmp_path: Path):
        path = tmp_path / "record"
        with patch.object(Path, "replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_group_record(["3rd"], path)
        assert list(tmp_path.iterdir()) == []
