"""Command-Line Interface handler for SubBurn."""

import argparse
import json
import logging
import os
import sys

from .config_loader import ConfigLoader
from .log_setup import setup_logging
from .audio_extractor import AudioExtractor
from .transcriber import WhisperTranscriber, result_from_whisper
from .video_renderer import VideoRenderer
from .segmenter import CueSegmenter
from .subtitle_formatter import VTTFormatter, supported_formats
from .subtitle_generator import SubtitleGenerator, MODE_AUDIO, MODE_VIDEO
from .exporter import export_subtitles
from .models import VIDEO_DIMENSIONS
from .exceptions import SubBurnError, ConfigurationError

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_components(config: dict):
    """Creates the Whisper/ffmpeg collaborators from config. Loading the model is the slow part."""
    device = config.get('device', 'cuda')
    transcriber = WhisperTranscriber(
        model_name=config.get('whisper_model', 'medium'),
        device=device,
        fp16=config.get('whisper_fp16', True) if device == 'cuda' else False,
        language=config.get('whisper_language'),
    )
    audio_extractor = AudioExtractor(ffmpeg_path=config.get('ffmpeg_path'))
    video_renderer = VideoRenderer(ffmpeg_path=config.get('ffmpeg_path'))
    return SubtitleGenerator(
        config=config,
        transcriber=transcriber,
        audio_extractor=audio_extractor,
        video_renderer=video_renderer,
    )


def load_config_with_logging(config_path, log_level_name: str, log_file_default: str = 'subburn.log') -> dict:
    """Sets up bootstrap logging, loads config, then re-initializes logging with the configured paths."""
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    setup_logging(log_level=log_level, log_dir='logs', log_file='subburn_init.log')

    try:
        config = ConfigLoader().load_config(config_path)
    except ConfigurationError as e:
        logger.critical(f"Failed to load configuration from {config_path}: {e}", exc_info=True)
        sys.exit(1)
    except FileNotFoundError:
        logger.critical(f"Configuration file not found: {config_path}", exc_info=True)
        sys.exit(1)

    setup_logging(log_level=log_level, log_dir=config.get('log_dir', 'logs'),
                  log_file=config.get('log_file', log_file_default))
    logger.info("Logging re-configured with settings from config file.")
    return config


def apply_style_overrides(config: dict, args: argparse.Namespace) -> None:
    overrides = {
        'device': getattr(args, 'device', None),
        'dimension': getattr(args, 'dimension', None),
        'subtitle_position': getattr(args, 'position', None),
        'subtitle_outline': getattr(args, 'outline', None),
        'subtitle_size': getattr(args, 'font_size', None),
    }
    for key, value in overrides.items():
        if value is not None:
            logger.info(f"Overriding {key} from config with CLI argument: {value}")
            config[key] = value


class CLIHandler:
    """Parses arguments and dispatches to the generate/export/segment commands."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description="SubBurn: transcribe audio or video and burn readable subtitles into the result.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        parser.add_argument("-c", "--config", default=None,
                            help="Path to the configuration YAML file. Built-in defaults are used when omitted.")
        parser.add_argument("--log-level", default="INFO", choices=LOG_LEVELS,
                            help="Set the logging level for console and file output.")
        subparsers = parser.add_subparsers(dest="command", required=True)

        generate = subparsers.add_parser("generate", help="Transcribe media and render a subtitled video.",
                                         formatter_class=argparse.ArgumentDefaultsHelpFormatter)
        generate.add_argument("-i", "--input", required=True, help="Audio or video file to process.")
        generate.add_argument("--mode", default=MODE_AUDIO, choices=[MODE_AUDIO, MODE_VIDEO],
                              help="'audio' renders over an image/black canvas, 'video' subtitles the video itself.")
        generate.add_argument("--image", default=None, help="Background image for audio mode.")
        generate.add_argument("--dimension", default=None, choices=list(VIDEO_DIMENSIONS),
                              help="Output size for audio mode (default from config).")
        generate.add_argument("--position", type=int, default=None, choices=[1, 2, 3],
                              help="Subtitle alignment: 1=left, 2=center, 3=right.")
        generate.add_argument("--outline", type=int, default=None, choices=range(0, 6),
                              help="Subtitle outline strength (0-5).")
        generate.add_argument("--font-size", type=int, default=None, help="Subtitle font size in pixels.")
        generate.add_argument("--device", default=None, choices=["cuda", "cpu"],
                              help="Override the processing device specified in config.")

        export = subparsers.add_parser("export", help="Convert a WebVTT file to another subtitle format.",
                                       formatter_class=argparse.ArgumentDefaultsHelpFormatter)
        export.add_argument("-s", "--subtitles", required=True, help="Source WebVTT file.")
        export.add_argument("-f", "--format", required=True, choices=supported_formats(), help="Target format.")
        export.add_argument("-o", "--output-dir", required=True, help="Directory for the exported file.")

        segment = subparsers.add_parser("segment", help="Build WebVTT cues from a saved transcription JSON.",
                                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
        segment.add_argument("-j", "--json", required=True,
                             help="Transcription JSON with 'segments' (start/end/text) and optional 'text'.")
        segment.add_argument("-o", "--output", required=True, help="Path of the WebVTT file to write.")

        return parser

    def _generate(self, args: argparse.Namespace, config: dict) -> int:
        if not os.path.isfile(args.input):
            logger.critical(f"Input file not found or is not a file: {args.input}")
            return 1
        apply_style_overrides(config, args)
        logger.info("Initializing SubBurn components...")
        generator = build_components(config)
        result = generator.generate(
            args.input,
            mode=args.mode,
            image_path=args.image,
            dimension=config.get('dimension', '720p'),
        )
        print(json.dumps({'videoPath': result.video_path, 'subtitlesPath': result.subtitles_path}))
        return 0

    def _export(self, args: argparse.Namespace) -> int:
        output_path = export_subtitles(args.subtitles, args.format, args.output_dir)
        logger.info(f"Exported subtitles to: {output_path}")
        return 0

    def _segment(self, args: argparse.Namespace) -> int:
        try:
            with open(args.json, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except (IOError, ValueError) as e:
            logger.critical(f"Could not read transcription JSON {args.json}: {e}")
            return 1
        if not isinstance(payload, dict):
            logger.critical(f"Transcription JSON {args.json} must be an object with 'segments' and 'text', "
                            f"got {type(payload).__name__}")
            return 1
        transcription = result_from_whisper(payload)
        segmenter = CueSegmenter()
        document = segmenter.segment(transcription.segments, transcription.full_text)
        for warning in segmenter.warnings:
            logger.warning(warning)
        VTTFormatter().write(document.cues, args.output)
        return 0

    def run(self, argv=None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the chosen command."""
        args = self.parser.parse_args(argv)
        config = load_config_with_logging(args.config, args.log_level)

        try:
            if args.command == "generate":
                exit_code = self._generate(args, config)
            elif args.command == "export":
                exit_code = self._export(args)
            else:
                exit_code = self._segment(args)
            if exit_code == 0:
                logger.info("SubBurn finished successfully.")
            sys.exit(exit_code)

        except (SubBurnError, FileNotFoundError) as e:
            logger.error(f"A SubBurn error occurred: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            sys.exit(2)
