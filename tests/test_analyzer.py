"""Tests for the end-to-end analyze pipeline with fake collaborators."""

import os

import pytest

from sentclip.analyzer import AudioAnalyzer
from sentclip.clip_orchestrator import ClipOrchestrator
from sentclip.exceptions import ExtractionError, InputError, TranscriptionError
from sentclip.models import TranscriptionResult
from sentclip.sentence_builder import SentenceBuilder
from sentclip.transcriber import TranscriptionConfig


@pytest.fixture
def make_analyzer(make_transcriber, hello_transcription, fake_extractor):
    def _make(transcriber=None, extractor=None, config=None):
        return AudioAnalyzer(
            transcriber=transcriber or make_transcriber(hello_transcription),
            sentence_builder=SentenceBuilder(),
            orchestrator=ClipOrchestrator(extractor or fake_extractor),
            transcription_config=config or TranscriptionConfig(encoding=None),
        )
    return _make


class TestAnalyze:

    def test_returns_sentences_with_clip_files(self, tmp_path, source_audio, make_analyzer):
        output_dir = tmp_path / "sentence-audio"
        result = make_analyzer().analyze(source_audio, str(output_dir))
        assert [c.file_name for c in result.clips] == ["sentence_1.mp3", "sentence_2.mp3"]
        assert [s.text for s in result.sentences] == ["Hello world.", "How are you?"]
        assert sorted(os.listdir(output_dir)) == ["sentence_1.mp3", "sentence_2.mp3"]
        assert result.source_audio_path == source_audio

    def test_keeps_original_transcription(self, tmp_path, source_audio, make_analyzer, hello_transcription):
        result = make_analyzer().analyze(source_audio, str(tmp_path / "out"))
        assert result.transcription is hello_transcription

    def test_to_dict_shape(self, tmp_path, source_audio, make_analyzer):
        payload = make_analyzer().analyze(source_audio, str(tmp_path / "out")).to_dict()
        assert set(payload) == {"sentences", "transcription"}
        first = payload["sentences"][0]
        assert set(first) == {"text", "startTime", "endTime", "fileName"}
        assert first["fileName"] == "sentence_1.mp3"
        assert first["startTime"] == 0.0
        assert first["endTime"] == pytest.approx(1.0)

    def test_transcriber_receives_file_bytes(self, tmp_path, source_audio, make_analyzer, make_transcriber, hello_transcription):
        transcriber = make_transcriber(hello_transcription)
        make_analyzer(transcriber=transcriber).analyze(source_audio, str(tmp_path / "out"))
        audio_bytes, config = transcriber.calls[0]
        assert audio_bytes == b"ID3 fake mp3 payload"
        assert config.enable_word_timestamps is True

    def test_empty_transcription_yields_no_clips(self, tmp_path, source_audio, make_analyzer, make_transcriber):
        result = make_analyzer(transcriber=make_transcriber(TranscriptionResult())).analyze(
            source_audio, str(tmp_path / "out")
        )
        assert result.clips == ()
        assert (tmp_path / "out").is_dir()

    def test_repeat_run_overwrites_same_files(self, tmp_path, source_audio, make_analyzer):
        analyzer = make_analyzer()
        output_dir = tmp_path / "out"
        first = analyzer.analyze(source_audio, str(output_dir))
        second = analyzer.analyze(source_audio, str(output_dir))
        assert [c.file_name for c in first.clips] == [c.file_name for c in second.clips]
        assert first.sentences == second.sentences
        assert sorted(os.listdir(output_dir)) == ["sentence_1.mp3", "sentence_2.mp3"]


class TestEncoding:

    def test_inferred_from_extension(self, tmp_path, source_audio, make_analyzer, make_transcriber, hello_transcription):
        transcriber = make_transcriber(hello_transcription)
        make_analyzer(transcriber=transcriber).analyze(source_audio, str(tmp_path / "out"))
        assert transcriber.calls[0][1].encoding == "MP3"

    def test_unknown_extension_left_to_provider(self, tmp_path, make_analyzer, make_transcriber, hello_transcription):
        source = tmp_path / "lesson.wav"
        source.write_bytes(b"RIFF")
        transcriber = make_transcriber(hello_transcription)
        make_analyzer(transcriber=transcriber).analyze(str(source), str(tmp_path / "out"))
        assert transcriber.calls[0][1].encoding == "ENCODING_UNSPECIFIED"

    def test_explicit_encoding_kept(self, tmp_path, source_audio, make_analyzer, make_transcriber, hello_transcription):
        transcriber = make_transcriber(hello_transcription)
        config = TranscriptionConfig(encoding="FLAC", language_code="en-GB")
        make_analyzer(transcriber=transcriber, config=config).analyze(source_audio, str(tmp_path / "out"))
        assert transcriber.calls[0][1] is config


class TestInputErrors:

    def test_missing_file(self, tmp_path, make_analyzer, make_transcriber, hello_transcription):
        transcriber = make_transcriber(hello_transcription)
        with pytest.raises(InputError):
            make_analyzer(transcriber=transcriber).analyze(str(tmp_path / "missing.mp3"), str(tmp_path / "out"))
        assert transcriber.calls == []

    def test_empty_file(self, tmp_path, make_analyzer, make_transcriber, hello_transcription):
        source = tmp_path / "empty.mp3"
        source.write_bytes(b"")
        transcriber = make_transcriber(hello_transcription)
        with pytest.raises(InputError, match="empty"):
            make_analyzer(transcriber=transcriber).analyze(str(source), str(tmp_path / "out"))
        assert transcriber.calls == []

    def test_directory_instead_of_file(self, tmp_path, make_analyzer):
        with pytest.raises(InputError):
            make_analyzer().analyze(str(tmp_path), str(tmp_path / "out"))

    def test_no_path(self, tmp_path, make_analyzer):
        with pytest.raises(InputError):
            make_analyzer().analyze("", str(tmp_path / "out"))


class TestTranscriptionFailure:

    def test_propagates_before_any_extraction(self, tmp_path, source_audio, make_analyzer, make_transcriber, fake_extractor):
        transcriber = make_transcriber(None, error=TranscriptionError("401 unauthenticated"))
        output_dir = tmp_path / "out"
        with pytest.raises(TranscriptionError, match="unauthenticated"):
            make_analyzer(transcriber=transcriber).analyze(source_audio, str(output_dir))
        assert fake_extractor.calls == []
        assert not output_dir.exists()

    def test_unexpected_provider_error_is_wrapped(self, tmp_path, source_audio, make_analyzer, make_transcriber):
        cause = ConnectionError("network down")
        transcriber = make_transcriber(None, error=cause)
        with pytest.raises(TranscriptionError) as excinfo:
            make_analyzer(transcriber=transcriber).analyze(source_audio, str(tmp_path / "out"))
        assert excinfo.value.__cause__ is cause


class TestExtractionFailure:

    def test_no_partial_result(self, tmp_path, source_audio, make_analyzer, make_extractor, codec_error):
        extractor = make_extractor(failures={"sentence_2.mp3": codec_error})
        with pytest.raises(ExtractionError):
            make_analyzer(extractor=extractor).analyze(source_audio, str(tmp_path / "out"))
