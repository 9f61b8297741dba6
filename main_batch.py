#!/usr/bin/env python3
"""
SubBurn Batch Processing Entry Point

Processes every audio or video file in a directory, smallest first,
rendering a subtitled video for each with one set of loaded components.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Tuple

from tqdm import tqdm

from subburn.cli import LOG_LEVELS, build_components, load_config_with_logging
from subburn.subtitle_generator import MODE_AUDIO, MODE_VIDEO
from subburn.exceptions import SubBurnError

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = ('.mp3', '.wav', '.m4a', '.aac', '.flac', '.ogg')
VIDEO_EXTENSIONS = ('.mp4', '.mov', '.mkv', '.webm', '.avi')

def find_and_sort_media(input_dir: str) -> List[Tuple[str, int, str]]:
    """
    Finds audio and video files in the input directory and sorts them by size.

    Returns:
        A list of (filepath, filesize, mode) tuples, smallest file first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    media = []
    logger.info(f"Scanning directory for media files: {input_dir}")
    for filename in os.listdir(input_dir):
        ext = os.path.splitext(filename)[1].lower()
        if ext in AUDIO_EXTENSIONS:
            mode = MODE_AUDIO
        elif ext in VIDEO_EXTENSIONS:
            mode = MODE_VIDEO
        else:
            continue
        filepath = os.path.join(input_dir, filename)
        try:
            if os.path.isfile(filepath):
                media.append((filepath, os.path.getsize(filepath), mode))
        except OSError as e:
            logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    media.sort(key=lambda item: item[1])
    logger.info(f"Found {len(media)} media files. Sorted by size (smallest first).")
    return media


def run_batch_processing(argv=None):
    """Parses arguments, sets up, and runs the batch generation."""
    parser = argparse.ArgumentParser(
        description="SubBurn Batch: render subtitled videos for all media files in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("-i", "--input-dir", required=True, help="Directory containing audio/video files.")
    parser.add_argument("-c", "--config", default=None, help="Path to the configuration YAML file.")
    parser.add_argument("--image", default=None, help="Background image used for every audio file.")
    parser.add_argument("--log-level", default="INFO", choices=LOG_LEVELS,
                        help="Set the logging level for console and file output.")
    parser.add_argument("--device", default=None, choices=["cuda", "cpu"],
                        help="Override the processing device (cuda or cpu) specified in config.")
    args = parser.parse_args(argv)

    config = load_config_with_logging(args.config, args.log_level, log_file_default='subburn_batch.log')
    if args.device:
        logger.info(f"Overriding device from config with CLI argument: {args.device}")
        config['device'] = args.device

    try:
        media = find_and_sort_media(args.input_dir)
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        sys.exit(1)
    if not media:
        logger.warning(f"No media files found in {args.input_dir}. Exiting.")
        sys.exit(0)

    try:
        logger.info("Initializing SubBurn components for batch processing...")
        generator = build_components(config)
    except SubBurnError as e:
        logger.critical(f"Failed to initialize SubBurn components: {e}", exc_info=True)
        sys.exit(1)

    total_files = len(media)
    files_processed = 0
    files_failed = 0
    batch_start_time = time.time()
    logger.info(f"--- Starting Batch Generation for {total_files} files ---")

    with tqdm(total=total_files, unit="file", desc="Starting Batch") as pbar:
        for media_path, _, mode in media:
            filename = os.path.basename(media_path)
            pbar.set_description(f"Processing: {filename[:30]}...")
            try:
                result = generator.generate(
                    media_path,
                    mode=mode,
                    image_path=args.image if mode == MODE_AUDIO else None,
                    dimension=config.get('dimension', '720p'),
                )
                logger.info(f"{filename}: rendered {result.video_path}")
                files_processed += 1
            except (SubBurnError, FileNotFoundError) as e:
                logger.error(f"SubBurn failed for '{filename}': {e}")
                files_failed += 1
            except KeyboardInterrupt:
                logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
                sys.exit(1)
            finally:
                pbar.update(1)

    logger.info("--- Batch Generation Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{total_files} files")
    logger.info(f"Failed: {files_failed}/{total_files} files")
    sys.exit(1 if files_failed else 0)


if __name__ == "__main__":
    run_batch_processing()
