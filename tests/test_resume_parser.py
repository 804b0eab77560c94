"""Tests for resume text extraction and skill matching."""

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from roleready.resume_parser import (
    DOC_MIME,
    DOCX_MIME,
    PDF_MIME,
    EmptyResumeError,
    SkillMatch,
    UnreadableResumeError,
    UnsupportedFileTypeError,
    extract_resume_text,
    extract_text_from_resume,
    generate_skill_variations,
    guess_mime_type,
    is_skill_in_text,
    match_skills_in_text,
    normalize_text,
    parse_resume_file,
)


def _skill(name, domain=None):
    return SkillMatch(id=name.lower(), name=name, normalized_name=name.lower(), domain=domain)


def _mock_pdf(page_texts):
    pages = []
    for text in page_texts:
        p = MagicMock()
        p.get_text.return_value = text
        pages.append(p)
    mock_doc = MagicMock()
    mock_doc.__enter__ = MagicMock(return_value=mock_doc)
    mock_doc.__exit__ = MagicMock(return_value=False)
    mock_doc.__iter__ = MagicMock(return_value=iter(pages))
    return mock_doc


class TestExtractText:
    def test_pdf_extracts_all_pages(self):
        """A 3-page resume must return text from ALL pages.
        Bug here = skills listed on page 2-3 never get suggested."""
        mock_doc = _mock_pdf(["Name: John", "Experience: 5 years Python", "Education: MSc"])

        with patch("roleready.resume_parser.fitz.open", return_value=mock_doc):
            result = extract_text_from_resume(b"bytes", PDF_MIME)

        assert "Name: John" in result
        assert "Experience: 5 years Python" in result
        assert "Education: MSc" in result

    def test_pdf_whitespace_collapsed_to_single_line(self):
        """PDF layout newlines and runs of spaces collapse into single spaces."""
        mock_doc = _mock_pdf(["Skills:\n  React\n\nDocker  ", "\nGit\n"])

        with patch("roleready.resume_parser.fitz.open", return_value=mock_doc):
            result = extract_text_from_resume(b"bytes", PDF_MIME)

        assert result == "Skills: React Docker Git"

    def test_docx_preserves_paragraph_separation(self):
        """Paragraphs must be newline-separated, otherwise a skill at the end of
        one line fuses with the first word of the next."""
        paras = [MagicMock(text=t) for t in ["Skills: Python", "Company: Google"]]
        mock_doc = MagicMock(paragraphs=paras, tables=[])

        with patch("roleready.resume_parser.Document", return_value=mock_doc):
            result = extract_text_from_resume(b"bytes", DOCX_MIME)

        assert result == "Skills: Python\nCompany: Google"

    def test_docx_includes_table_text(self):
        """Two-column resume templates keep skills in tables."""
        cell = MagicMock(paragraphs=[MagicMock(text="Kubernetes")])
        table = MagicMock(rows=[MagicMock(cells=[cell])])
        mock_doc = MagicMock(paragraphs=[MagicMock(text="Jane Doe")], tables=[table])

        with patch("roleready.resume_parser.Document", return_value=mock_doc):
            result = extract_text_from_resume(b"bytes", DOCX_MIME)

        assert result == "Jane Doe\nKubernetes"

    def test_legacy_word_mime_uses_docx_reader(self):
        mock_doc = MagicMock(paragraphs=[MagicMock(text="Word")], tables=[])

        with patch("roleready.resume_parser.Document", return_value=mock_doc) as doc:
            extract_text_from_resume(b"bytes", DOC_MIME)

        doc.assert_called_once()

    def test_unsupported_mime_type_raises(self):
        """Text files and images must be rejected, not parsed as empty."""
        for mime in ["text/plain", "image/png", ""]:
            with pytest.raises(UnsupportedFileTypeError, match="Unsupported file type"):
                extract_text_from_resume(b"data", mime)

    def test_pdf_library_crash_propagates(self):
        """A corrupt PDF error must bubble up so the resume is marked failed,
        not silently parsed into zero skills."""
        with patch(
            "roleready.resume_parser.fitz.open", side_effect=RuntimeError("corrupt PDF")
        ):
            with pytest.raises(RuntimeError, match="corrupt PDF"):
                extract_text_from_resume(b"not a pdf", PDF_MIME)

    def test_corrupt_docx_raises_domain_error(self):
        """A corrupt or mislabelled .docx must surface as a ValueError the
        page can report, not a raw zipfile traceback."""
        with pytest.raises(UnreadableResumeError, match="Could not read Word document"):
            extract_text_from_resume(b"not a zip", DOCX_MIME)

    def test_legacy_binary_doc_is_unreadable(self):
        """Old binary .doc files are not zip packages either."""
        with pytest.raises(ValueError):
            extract_text_from_resume(b"\xd0\xcf\x11\xe0 binary word", DOC_MIME)


class TestUploadedFiles:
    def test_mime_type_guessed_from_extension(self):
        assert guess_mime_type("CV.PDF") == PDF_MIME
        assert guess_mime_type("resume.docx") == DOCX_MIME
        assert guess_mime_type("old.doc") == DOC_MIME
        assert guess_mime_type("notes.txt") is None

    def test_upload_dispatches_on_file_name(self):
        mock_doc = _mock_pdf(["Python"])
        uploaded = SimpleNamespace(name="cv.pdf", read=lambda: b"bytes")

        with patch("roleready.resume_parser.fitz.open", return_value=mock_doc):
            assert extract_resume_text(uploaded) == "Python"

    def test_unsupported_upload_raises(self):
        for ext in [".txt", ".odt", ".rtf", ".pages"]:
            uploaded = SimpleNamespace(name=f"cv{ext}", read=lambda: b"data")
            with pytest.raises(UnsupportedFileTypeError):
                extract_resume_text(uploaded)


class TestNormalizeText:
    def test_keeps_plus_and_hash(self):
        """C++ and C# must survive normalisation or they can never match."""
        assert normalize_text("C++ / C# developer") == "c++ c# developer"

    def test_js_suffix_folded_into_word(self):
        assert normalize_text("React.js, Node.js & Vue.js!") == "reactjs nodejs vuejs"

    def test_punctuation_becomes_space(self):
        assert normalize_text("CI/CD, REST-API;\tSQL.") == "ci cd rest api sql"

    def test_empty_and_none(self):
        assert normalize_text("") == ""
        assert normalize_text(None) == ""

    def test_idempotent(self):
        once = normalize_text("Built React.js apps with Node.js, C++ & CI/CD")
        assert normalize_text(once) == once


class TestSkillVariations:
    def test_js_frameworks(self):
        assert generate_skill_variations("React.js") == ["reactjs", "react"]
        assert generate_skill_variations("Node.js") == ["nodejs", "node"]

    def test_multi_word_adds_joined_form(self):
        assert generate_skill_variations("React Native") == ["react native", "reactnative"]

    def test_punctuated_name(self):
        assert generate_skill_variations("CI/CD") == ["ci cd", "cicd"]

    def test_plain_name_has_single_variation(self):
        assert generate_skill_variations("Python") == ["python"]


class TestIsSkillInText:
    def test_short_skill_requires_whole_word(self):
        """'Go' must not be found in 'going' - the classic false positive."""
        assert not is_skill_in_text("going to the store", _skill("Go"))
        assert is_skill_in_text("i write go daily", _skill("Go"))

    def test_short_skill_not_matched_inside_longer_word(self):
        """SQL must not be inferred from MySQL."""
        assert not is_skill_in_text("mysql administration", _skill("SQL"))

    def test_single_character_skills_ignored(self):
        """'C' and 'R' would match every stray letter."""
        assert not is_skill_in_text("c programming in r", _skill("C"))

    def test_symbol_skills_match_before_space(self):
        assert is_skill_in_text("c++ and c# developer", _skill("C++"))
        assert is_skill_in_text("c++ and c# developer", _skill("C#"))

    def test_js_alias_matches_bare_name(self):
        assert is_skill_in_text("built apps with react and redux", _skill("React.js"))

    def test_long_skill_matches_compound_word(self):
        assert is_skill_in_text("dockerized services", _skill("Docker"))

    def test_multi_word_skill_matches_joined_form(self):
        assert is_skill_in_text("shipped reactnative apps", _skill("React Native"))


class TestMatchSkillsInText:
    def test_returns_matches_in_catalog_order(self):
        skills = [_skill("Python"), _skill("Java"), _skill("Docker"), _skill("Go")]
        text = normalize_text("Docker, Python and some Go.")

        result = match_skills_in_text(text, skills)

        assert [s.name for s in result] == ["Python", "Docker", "Go"]

    def test_duplicate_names_matched_once(self):
        """A catalog with the same name twice must not suggest it twice."""
        skills = [_skill("Python"), SkillMatch(id="other", name="Python", normalized_name="python")]
        result = match_skills_in_text("python", skills)
        assert len(result) == 1
        assert result[0].id == "python"

    def test_no_matches_logs_common_skill_diagnostics(self, caplog):
        caplog.set_level(logging.DEBUG, logger="roleready.resume_parser")
        skills = [_skill("HTML"), _skill("Rust")]

        result = match_skills_in_text("nothing relevant here", skills)

        assert result == []
        assert "Probe 'HTML'" in caplog.text
        assert "'CSS' is not in the catalog" in caplog.text

    def test_empty_catalog(self):
        assert match_skills_in_text("python", []) == []


class TestParseResumeFile:
    def test_happy_path(self, tmp_path):
        path = tmp_path / "cv.pdf"
        path.write_bytes(b"%PDF")
        skills = [_skill("Python"), _skill("Docker"), _skill("Rust")]

        with patch(
            "roleready.resume_parser.extract_text_from_resume",
            return_value="Experienced in Python and Docker.",
        ):
            result = parse_resume_file(path, PDF_MIME, skills)

        assert result.raw_text == "Experienced in Python and Docker."
        assert result.normalized_text == "experienced in python and docker"
        assert [s.name for s in result.matched_skills] == ["Python", "Docker"]
        assert result.text_length == len(result.raw_text)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_resume_file(tmp_path / "missing.pdf", PDF_MIME, [])

    def test_blank_text_raises(self, tmp_path):
        """A scanned image-only PDF has no text; it must fail loudly."""
        path = tmp_path / "scan.pdf"
        path.write_bytes(b"%PDF")

        with patch("roleready.resume_parser.extract_text_from_resume", return_value="  \n"):
            with pytest.raises(EmptyResumeError, match="Could not extract text"):
                parse_resume_file(path, PDF_MIME, [_skill("Python")])
