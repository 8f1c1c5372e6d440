"""
Unit tests for the streaming MHTML parser (mhtml_parser.py).

Tests cover:
- End-to-end parsing of multipart archives
- Folded and encoded headers in the envelope
- Decoder selection and overrides
- Failure modes and partially consumed streams
- File chunk sources
"""

import io

import pytest

from mhtml_stream.errors import DecodeError, EncodingError, StructuralError
from mhtml_stream.parsing.decoders import decode_identity
from mhtml_stream.parsing.mhtml_parser import MhtmlPart, parse_mhtml
from mhtml_stream.parsing.sources import iter_file_chunks, iter_stream_chunks
from tests.fixtures.mhtml import (
    SAMPLE_ARCHIVES,
    SAVED_PAGE_HTML,
    WIKIPEDIA_BASE64_BODY,
    chunked,
    to_crlf,
)


def parse_text(text: str, **kwargs):
    return list(parse_mhtml([to_crlf(text)], **kwargs))


class TestParseMhtml:
    """Tests for parse_mhtml() on well-formed archives."""

    @pytest.mark.unit
    def test_wikipedia_example(self, wikipedia_mhtml):
        parts = list(parse_mhtml([wikipedia_mhtml]))

        assert [dict(part.headers) for part in parts] == [
            {
                "MIME-Version": "1.0",
                "Subject": "¡Hola, señor!",
                "Content-Type": "multipart/mixed; boundary=frontier",
            },
            {"Content-Type": "text/plain"},
            {
                "Content-Type": "application/octet-stream",
                "Content-Transfer-Encoding": "base64",
            },
        ]
        assert parts[0].content == b"This is a message with multiple parts in MIME format."
        assert parts[1].content == b"This is the body of the message."
        assert parts[2].content == WIKIPEDIA_BASE64_BODY

    @pytest.mark.unit
    def test_independent_of_chunking(self, wikipedia_mhtml):
        expected = [(list(p.headers.entries_all()), p.content) for p in parse_mhtml([wikipedia_mhtml])]
        for size in (1, 2, 3, 5, 8, 13, 64):
            parts = parse_mhtml(chunked(wikipedia_mhtml, size))
            assert [(list(p.headers.entries_all()), p.content) for p in parts] == expected

    @pytest.mark.unit
    def test_other_headers(self):
        parts = list(parse_mhtml([SAMPLE_ARCHIVES["other_headers"]]))
        assert [dict(part.headers) for part in parts] == [
            {
                "MIME-Version": "1.0",
                "From": "this is a wrapped: header with an extra delimiter in: both sections",
                "Subject": "Base 64 — Mozilla Developer Network",
                "Content-Type": 'multipart/mixed; boundary="quoted-frontier"',
            }
        ]
        assert parts[0].content == b"This is a message with multiple parts in MIME format."

    @pytest.mark.unit
    def test_folded_encoded_envelope(self):
        parts = list(parse_mhtml([SAMPLE_ARCHIVES["saved_by_blink"]]))
        assert len(parts) == 1
        assert dict(parts[0].headers) == {
            "From": "<Saved by Blink>",
            "Snapshot-Content-Location": (
                "https://www.newyorker.com/culture/cultural-comment/"
                "what-the-twilight-zone-reveals-about-todays-prestige-tv"
            ),
            "Subject": "What “The Twilight Zone” Reveals About Today’s Prestige TV | The New Yorker",
            "Date": "Sat, 16 Apr 2022 17:48:31 -0000",
            "MIME-Version": "1.0",
            "Content-Type": (
                'multipart/related; type="text/html"; '
                'boundary="----MultipartBoundary--NYswbLinUCqE8KaJecg8DEV6giqFeyGLtHeT0qLB4h----"'
            ),
        }
        assert parts[0].content == b""

    @pytest.mark.unit
    def test_saved_page(self, saved_page_mhtml):
        parts = list(parse_mhtml([saved_page_mhtml]))
        assert len(parts) == 4

        envelope, html, image, css = parts
        assert envelope.content == b""
        assert envelope.headers.get("Subject") == "Example Domain"

        assert html.content_type == "text/html"
        assert html.transfer_encoding == "quoted-printable"
        assert html.content_location == "https://example.com/index.html"
        assert html.content == SAVED_PAGE_HTML

        assert image.content == b"\x89PNG\r\n\x1a\n"
        assert css.content == b"body { margin: 0; }p.intro { color: #333; }"
        assert css.transfer_encoding == "7bit"

    @pytest.mark.unit
    def test_parts_are_frozen(self, wikipedia_mhtml):
        for part in parse_mhtml([wikipedia_mhtml]):
            assert isinstance(part, MhtmlPart)
            assert part.headers.frozen is True

    @pytest.mark.unit
    def test_default_transfer_encoding(self, wikipedia_mhtml):
        parts = list(parse_mhtml([wikipedia_mhtml]))
        assert parts[1].transfer_encoding == "7bit"
        assert parts[2].transfer_encoding == "base64"

    @pytest.mark.unit
    def test_bytes_after_terminus_ignored(self, wikipedia_mhtml):
        parts = list(parse_mhtml([wikipedia_mhtml + b"epilogue\r\n--frontier\r\n"]))
        assert len(parts) == 3

    @pytest.mark.unit
    def test_custom_delimiter(self):
        data = (
            b"Content-Type: multipart/mixed; boundary=b\n\n"
            b"--b\nContent-Type: text/plain\n\nhello\n--b--\n"
        )
        parts = list(parse_mhtml([data], delimiter=b"\n"))
        assert [part.content for part in parts] == [b"", b"hello"]


class TestDecoderOverrides:
    """Tests for decoder_overrides handling."""

    @pytest.mark.unit
    def test_binary_rejected_by_default(self):
        parts = parse_mhtml([SAMPLE_ARCHIVES["binary_part"]])
        envelope = next(parts)
        assert envelope.content == b""
        with pytest.raises(EncodingError, match="explicitly not supported"):
            next(parts)

    @pytest.mark.unit
    def test_binary_override(self):
        parts = list(parse_mhtml([SAMPLE_ARCHIVES["binary_part"]], {"binary": decode_identity}))
        assert parts[1].content == b"raw line oneraw line two"

    @pytest.mark.unit
    def test_custom_encoding(self):
        def decode_upper(lines):
            for line in lines:
                yield line.upper()

        text = """Content-Type: multipart/mixed; boundary=b

--b
Content-Transfer-Encoding: x-upper

shout
--b--
"""
        parts = parse_text(text, decoder_overrides={"x-upper": decode_upper})
        assert parts[1].content == b"SHOUT"

    @pytest.mark.unit
    def test_decoder_reading_partially_stays_in_sync(self):
        def decode_first_line(lines):
            for line in lines:
                yield line
                return

        text = """Content-Type: multipart/mixed; boundary=b

--b
Content-Transfer-Encoding: x-first

kept
dropped
--b
Content-Type: text/plain

next part
--b--
"""
        parts = parse_text(text, decoder_overrides={"x-first": decode_first_line})
        assert [part.content for part in parts] == [b"", b"kept", b"next part"]
        assert parts[2].headers.get("Content-Type") == "text/plain"


class TestParseMhtmlErrors:
    """Tests for parse_mhtml() failure modes."""

    @pytest.mark.unit
    def test_non_ascii_in_q_encoding(self):
        data = b"MIME-Version: 1.0\r\nSubject: =?iso-8859-1?Q?=A1Hola,\xffse=F1or!?=\r\n"
        with pytest.raises(DecodeError, match="got non-ascii character when decoding q-quoted word"):
            list(parse_mhtml([data]))

    @pytest.mark.unit
    def test_undecodable_encoded_word_charset(self):
        data = (
            b"Subject: =?idna?Q?xn--zz?=\r\n"
            b"Content-Type: multipart/mixed; boundary=b\r\n\r\n--b--\r\n"
        )
        with pytest.raises(DecodeError, match="bytes not valid idna"):
            list(parse_mhtml([data]))

    @pytest.mark.unit
    def test_without_empty_header_delimiter(self):
        with pytest.raises(
            StructuralError, match="didn't find an empty line to signify the end of header parsing"
        ):
            parse_text("MIME-Version: 1.0")

    @pytest.mark.unit
    def test_invalid_header(self):
        with pytest.raises(StructuralError, match="header line didn't have key-value delimiter"):
            parse_text("MIME-Version: 1.0\ninvalid header\n\n")

    @pytest.mark.unit
    def test_missing_content_type(self):
        with pytest.raises(StructuralError, match="first headers didn't contain a content type"):
            parse_text("MIME-Version: 1.0\n\n")

    @pytest.mark.unit
    def test_missing_multipart(self):
        with pytest.raises(StructuralError, match="first content type header didn't contain"):
            parse_text("MIME-Version: 1.0\nContent-Type: text/plain; boundary=frontier\n\n")

    @pytest.mark.unit
    def test_missing_boundary(self):
        with pytest.raises(StructuralError, match="first content type header didn't contain"):
            parse_text("MIME-Version: 1.0\nContent-Type: multipart/mixed\n\n")

    @pytest.mark.unit
    def test_missing_decoder(self):
        text = (
            "MIME-Version: 1.0\nContent-Transfer-Encoding: unknown\n"
            "Content-Type: multipart/mixed; boundary=frontier\n\n"
        )
        with pytest.raises(EncodingError, match="unhandled encoding type: unknown"):
            parse_text(text)

    @pytest.mark.unit
    def test_without_terminus(self):
        text = (
            "MIME-Version: 1.0\nContent-Type: multipart/mixed; boundary=frontier\n\n"
            "This is a message with multiple parts in MIME format.\n"
        )
        with pytest.raises(
            StructuralError, match="stream didn't end with the appropriate termination boundary"
        ):
            parse_text(text)

    @pytest.mark.unit
    def test_parts_before_failure_stay_valid(self, missing_terminus_mhtml):
        parts = parse_mhtml([missing_terminus_mhtml])
        envelope = next(parts)
        with pytest.raises(StructuralError, match="--frontier--"):
            next(parts)
        assert envelope.content == b"This is a message with multiple parts in MIME format."
        assert envelope.headers.get("MIME-Version") == "1.0"

    @pytest.mark.unit
    def test_invalid_base64_body(self):
        text = """Content-Type: multipart/mixed; boundary=b

--b
Content-Transfer-Encoding: base64

@@@@
--b--
"""
        with pytest.raises(DecodeError, match="invalid base64"):
            parse_text(text)


class TestLazyConsumption:
    """Tests that the parser only pulls what it needs."""

    @pytest.mark.unit
    def test_abandoning_iteration(self, wikipedia_mhtml):
        pulled = []

        def source():
            for chunk in chunked(wikipedia_mhtml, 16):
                pulled.append(chunk)
                yield chunk

        parts = parse_mhtml(source())
        first = next(parts)
        assert first.headers.get("Subject") == "¡Hola, señor!"
        assert sum(len(chunk) for chunk in pulled) < len(wikipedia_mhtml)
        parts.close()

    @pytest.mark.unit
    def test_boundary_resolved_once(self):
        """Later Content-Type headers don't change the boundary."""
        text = """Content-Type: multipart/mixed; boundary=first

--first
Content-Type: multipart/alternative; boundary=second

--second
--first--
"""
        parts = parse_text(text)
        assert len(parts) == 2
        assert parts[1].content == b"--second"


class TestChunkSources:
    """Tests for file and stream chunk sources."""

    @pytest.mark.unit
    def test_iter_stream_chunks(self):
        stream = io.BytesIO(b"abcdefgh")
        assert list(iter_stream_chunks(stream, 3)) == [b"abc", b"def", b"gh"]

    @pytest.mark.unit
    def test_iter_file_chunks(self, tmp_mhtml_file, saved_page_mhtml):
        chunks = list(iter_file_chunks(tmp_mhtml_file, 10))
        assert b"".join(chunks) == saved_page_mhtml
        assert all(len(chunk) == 10 for chunk in chunks[:-1])

    @pytest.mark.unit
    def test_parse_from_file(self, tmp_mhtml_file):
        parts = list(parse_mhtml(iter_file_chunks(tmp_mhtml_file, 7)))
        assert parts[1].content == SAVED_PAGE_HTML

    @pytest.mark.unit
    def test_iter_file_chunks_not_found(self):
        with pytest.raises(FileNotFoundError):
            list(iter_file_chunks("/nonexistent/path/page.mhtml"))
