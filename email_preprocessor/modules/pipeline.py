"""
Email Preprocessing Pipeline
Orchestrates decoding and feature extraction for one message at a time
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

from .email_record import EmailRecord
from .feature_extractor import FeatureExtractor, FeatureSet
from .preprocessors import SourceType, build_decoders, preprocess
from ..utils.config import Config
from ..utils.logging_utils import setup_logging
from ..utils.metrics import PreprocessingMetrics
from ..utils.sanitization import sanitize_for_logging


@dataclass
class ProcessedEmail:
    """A decoded record together with the features derived from it"""
    record: EmailRecord
    features: FeatureSet

    def to_dict(self):
        return {
            "email": self.record.to_dict(),
            "features": self.features.to_dict(),
        }


class EmailPreprocessingPipeline:
    """Main pipeline orchestrator"""

    def __init__(self, config: Optional[Config] = None, configure_logging: bool = False):
        """
        Initialize pipeline

        Args:
            config: Loaded configuration; read from .env when omitted
            configure_logging: Install root logging handlers from the config
        """
        self.config = config if config is not None else Config()
        self.config.validate()

        if configure_logging:
            setup_logging(self.config.system)

        self.logger = logging.getLogger("EmailPreprocessingPipeline")

        features = self.config.features
        self.extractor = FeatureExtractor(
            max_context_length=features.context_max_length,
            heading_style=features.markdown_heading_style,
            strip_tags=features.markdown_strip_tags,
        )
        self.decoders = build_decoders()
        self.metrics = PreprocessingMetrics()

    async def run(self, source: Union[SourceType, str], raw: Any) -> ProcessedEmail:
        """
        Decode one raw message and extract its features

        The first failure aborts the run and is re-raised unchanged; there
        is no retry and no partial result.

        Args:
            source: Source type of the raw message
            raw: Raw message in the source's native shape
        """
        started = time.perf_counter()
        try:
            record = await preprocess(source, raw, self.decoders)
            features = self.extractor.extract(record)
        except Exception as e:
            self.metrics.record_error(type(e).__name__)
            self.logger.error(
                "Failed to preprocess %s message: %s",
                sanitize_for_logging(str(getattr(source, "value", source))),
                sanitize_for_logging(str(e)),
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        source_name = SourceType(source).value
        self.metrics.record_decoded(source_name)
        self.metrics.record_processing_time(elapsed_ms)

        self.logger.info(
            "Preprocessed %s message %s (%s) in %.1f ms",
            source_name,
            sanitize_for_logging(str(record.id)),
            sanitize_for_logging(record.subject, max_length=50),
            elapsed_ms,
        )
        return ProcessedEmail(record=record, features=features)
