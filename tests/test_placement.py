"""Tests for placement of custodial files."""

import io
import logging

import pytest

from deposit_services.assemblers.placement import normalize_path, resolve_placements
from deposit_services.specifications import (
    DSpaceMETSSpecification,
    NihmsNativeSpecification,
    SimpleZipSpecification,
)
from schemas.submission import ContentFile, FileRole


def _files(*entries):
    return [
        ContentFile(name, role, lambda: io.BytesIO(b""), 0) for name, role in entries
    ]


class TestNormalizePath:
    """Tests for normalize_path."""

    def test_plain_path_unchanged(self):
        assert normalize_path("supplement/data.csv") == "supplement/data.csv"

    def test_backslashes_become_slashes(self):
        assert normalize_path("supplement\\data.csv") == "supplement/data.csv"

    def test_traversal_segments_dropped(self):
        """No path can escape the package root."""
        assert normalize_path("../../etc/passwd") == "etc/passwd"
        assert normalize_path("/abs/./file.txt") == "abs/file.txt"

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            normalize_path("./..//")


class TestResolvePlacements:
    """Tests for resolve_placements."""

    def test_unique_names_keep_their_paths(self):
        files = _files(
            ("manuscript.pdf", FileRole.MANUSCRIPT),
            ("figure1.png", FileRole.FIGURE),
        )

        placements = resolve_placements(files, SimpleZipSpecification())

        assert dict(placements) == {
            "manuscript.pdf": "manuscript.pdf",
            "figure1.png": "figure1.png",
        }

    def test_reserved_name_moves_under_role(self):
        """A file named like the METS manifest is moved to its role directory."""
        files = _files(("mets.xml", FileRole.SUPPLEMENT))

        placements = resolve_placements(files, DSpaceMETSSpecification())

        assert placements["mets.xml"] == "supplement/mets.xml"

    def test_reserved_name_ignores_case(self):
        files = _files(("METS.XML", FileRole.MANUSCRIPT))

        placements = resolve_placements(files, DSpaceMETSSpecification())

        assert placements["METS.XML"] == "manuscript/METS.XML"

    def test_flattening_collisions_get_numeric_suffix(self):
        """Files flattened onto the same name are all kept, in submission order."""
        files = _files(
            ("a/figure.png", FileRole.FIGURE),
            ("b/figure.png", FileRole.FIGURE),
            ("c/figure.png", FileRole.FIGURE),
        )

        placements = resolve_placements(files, NihmsNativeSpecification())

        assert list(placements.values()) == [
            "figure.png",
            "figure/figure.png",
            "figure/figure-1.png",
        ]

    def test_suffix_goes_before_extension(self):
        files = _files(
            ("x/manifest.txt", FileRole.TABLE),
            ("y/manifest.txt", FileRole.TABLE),
        )

        placements = resolve_placements(files, NihmsNativeSpecification())

        assert placements["x/manifest.txt"] == "table/manifest.txt"
        assert placements["y/manifest.txt"] == "table/manifest-1.txt"

    def test_file_cannot_shadow_directory(self):
        """A file whose path is a directory of an earlier file is remediated."""
        files = _files(
            ("data/values.csv", FileRole.SUPPLEMENT),
            ("data", FileRole.SUPPLEMENT),
        )

        placements = resolve_placements(files, SimpleZipSpecification())

        assert placements["data"] == "supplement/data"

    def test_file_cannot_nest_under_file(self):
        """A file cannot be placed inside a path already taken by a file."""
        files = _files(
            ("data", FileRole.SUPPLEMENT),
            ("data/values.csv", FileRole.SUPPLEMENT),
        )

        placements = resolve_placements(files, SimpleZipSpecification())

        assert placements["data"] == "data"
        assert placements["data/values.csv"] == "supplement/data/values.csv"

    def test_role_directory_taken_by_file(self):
        """A file named like the role directory pushes remediation to a suffixed one."""
        files = _files(
            ("supplement", FileRole.MANUSCRIPT),
            ("mets.xml", FileRole.SUPPLEMENT),
        )

        placements = resolve_placements(files, DSpaceMETSSpecification())

        assert placements["supplement"] == "supplement"
        assert placements["mets.xml"] == "supplement-1/mets.xml"

    def test_suffixed_role_directories_taken_by_files(self):
        files = _files(
            ("Supplement", FileRole.MANUSCRIPT),
            ("supplement-1", FileRole.MANUSCRIPT),
            ("mets.xml", FileRole.SUPPLEMENT),
        )

        placements = resolve_placements(files, DSpaceMETSSpecification())

        assert placements["mets.xml"] == "supplement-2/mets.xml"

    def test_nested_candidate_blocked_inside_role_directory(self):
        """A file blocking a directory under the role directory flattens the candidate."""
        files = _files(
            ("data", FileRole.SUPPLEMENT),
            ("supplement/data", FileRole.SUPPLEMENT),
            ("data/values.csv", FileRole.SUPPLEMENT),
        )

        placements = resolve_placements(files, SimpleZipSpecification())

        assert placements["data"] == "data"
        assert placements["supplement/data"] == "supplement/data"
        assert placements["data/values.csv"] == "supplement/values.csv"

    def test_case_insensitive_collision(self):
        files = _files(
            ("Figure.png", FileRole.FIGURE),
            ("figure.PNG", FileRole.FIGURE),
        )

        placements = resolve_placements(files, SimpleZipSpecification())

        assert placements["Figure.png"] == "Figure.png"
        assert placements["figure.PNG"] == "figure/figure.PNG"

    def test_duplicate_names_rejected(self):
        files = _files(
            ("a.pdf", FileRole.MANUSCRIPT),
            ("a.pdf", FileRole.SUPPLEMENT),
        )

        with pytest.raises(ValueError, match="duplicate"):
            resolve_placements(files, SimpleZipSpecification())

    def test_placements_are_unique(self):
        files = _files(
            ("mets.xml", FileRole.MANUSCRIPT),
            ("manuscript/mets.xml", FileRole.MANUSCRIPT),
            ("other/mets.xml", FileRole.MANUSCRIPT),
        )

        placements = resolve_placements(files, DSpaceMETSSpecification())

        paths = [p.casefold() for p in placements.values()]
        assert len(paths) == len(set(paths))
        assert "mets.xml" not in paths

    def test_deterministic(self):
        """The same submission always gets the same layout."""
        entries = [
            ("a/figure.png", FileRole.FIGURE),
            ("b/figure.png", FileRole.FIGURE),
            ("manifest.txt", FileRole.SUPPLEMENT),
        ]
        spec = NihmsNativeSpecification()

        first = resolve_placements(_files(*entries), spec)
        second = resolve_placements(_files(*entries), spec)

        assert list(first.items()) == list(second.items())

    def test_result_is_read_only(self):
        placements = resolve_placements(
            _files(("a.pdf", FileRole.MANUSCRIPT)), SimpleZipSpecification()
        )

        with pytest.raises(TypeError):
            placements["a.pdf"] = "b.pdf"

    def test_remediation_is_logged(self, caplog):
        with caplog.at_level(logging.INFO):
            resolve_placements(
                _files(("mets.xml", FileRole.MANUSCRIPT)), DSpaceMETSSpecification()
            )

        assert "manuscript/mets.xml" in caplog.text
