"""Command-Line Interface handler for embedsub."""

import argparse
import logging
import os
import sys
from typing import List, Optional

from .config_loader import ConfigLoader
from .log_setup import parse_log_level, setup_logging
from .models import PipelineStatus
from .pipeline import SubtitlePipeline
from .exceptions import EmbedSubError, ConfigurationError

logger = logging.getLogger(__name__) # Get logger for this module

class CLIHandler:
    """Parses arguments and runs the pipeline for one video file."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            description="embedsub: Extract the embedded subtitle of a video and translate it.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter # Show defaults in help
        )
        parser.add_argument(
            "-v", "--video",
            required=True,
            help="Path to the input video file."
        )
        parser.add_argument(
            "-c", "--config",
            default="config.yaml",
            help="Path to the configuration YAML file."
        )
        parser.add_argument(
            "-l", "--target-lang",
            default=None, # Default taken from config file
            help="Override the target language specified in the config file (e.g. 'Spanish')."
        )
        parser.add_argument(
            "--log-level",
            default=None, # Default taken from config, then INFO
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Set the logging level for console and file output."
        )
        parser.add_argument(
            "--skip-detection",
            action="store_true",
            help="Translate without checking whether the subtitle already is in the target language."
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Translate even if a translated subtitle file already exists."
        )
        return parser

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the pipeline."""
        args = self.parser.parse_args(argv)

        # Temporarily setup basic logging to catch config loading errors
        log_level = parse_log_level(args.log_level or "INFO")
        setup_logging(log_level=log_level, log_dir='logs', log_file='embedsub_init.log')

        try:
            config = ConfigLoader().load_config(args.config)
        except ConfigurationError as e:
            logger.critical(f"Failed to load configuration from {args.config}: {e}", exc_info=True)
            sys.exit(1)
        except FileNotFoundError:
            logger.critical(f"Configuration file not found: {args.config}", exc_info=True)
            sys.exit(1)

        # --- Re-configure Logging with settings from Config ---
        log_level = parse_log_level(args.log_level or config.get('log_level', 'INFO'))
        setup_logging(
            log_level=log_level,
            log_dir=config.get('log_dir', 'logs'),
            log_file=config.get('log_file', 'embedsub.log')
        )

        if args.target_lang:
            logger.info(f"Overriding target_language from config with CLI argument: {args.target_lang}")
            config['target_language'] = args.target_lang

        video_path = os.path.abspath(args.video)
        if not os.path.isfile(video_path):
            logger.critical(f"Input video file not found or is not a file: {video_path}")
            sys.exit(1)

        try:
            pipeline = SubtitlePipeline.from_config(config)
            result = pipeline.process(video_path, skip_detection=args.skip_detection, force=args.force)
        except EmbedSubError as e:
             logger.error(f"An embedsub error occurred: {e}")
             sys.exit(1)
        except KeyboardInterrupt:
             logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
             sys.exit(1)
        except Exception as e:
             logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
             sys.exit(2) # Use a different exit code for unexpected crashes

        if result.status is PipelineStatus.NO_SUBTITLES:
            logger.error(f"No embedded text subtitles found in video: {video_path}")
            sys.exit(1)
        if result.status is PipelineStatus.TRANSLATED:
            logger.info(f"Translated subtitle: {result.output_path}")
        elif result.status is PipelineStatus.SKIPPED_EXISTING:
            logger.info(f"Subtitle already exists (use --force to overwrite): {result.output_path}")
        else:
            logger.info("Translation skipped: subtitle is already in the target language")
        sys.exit(0)
