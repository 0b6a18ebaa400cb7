# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for class obfuscation components."""

from classmask.config import ObfuscationConfig, load_config
from classmask.errors import (
    ArtifactIOError,
    ArtifactNotFoundError,
    ConfigError,
    MappingError,
    MappingLoadError,
    ObfuscationError,
    PipelineError,
    RewriteError,
)
from classmask.extractor import extract_class_names, extract_id_names
from classmask.ignore import IgnoreMatcher, IgnoreRule
from classmask.mapping import MappingTable, build_mapping
from classmask.naming import NameGenerator, RandomStrategy, SequentialStrategy
from classmask.pipeline import Pipeline, PipelineResult, PipelineState, RunReport
from classmask.rewriters import rewrite_markup, rewrite_script, rewrite_stylesheet
from classmask.scanner import iter_artifacts
from classmask.store import MappingArtifact, MappingStore

__all__ = [
    "ArtifactIOError",
    "ArtifactNotFoundError",
    "ConfigError",
    "IgnoreMatcher",
    "IgnoreRule",
    "MappingArtifact",
    "MappingError",
    "MappingLoadError",
    "MappingStore",
    "MappingTable",
    "NameGenerator",
    "ObfuscationConfig",
    "ObfuscationError",
    "Pipeline",
    "PipelineError",
    "PipelineResult",
    "PipelineState",
    "RandomStrategy",
    "RewriteError",
    "RunReport",
    "SequentialStrategy",
    "build_mapping",
    "extract_class_names",
    "extract_id_names",
    "iter_artifacts",
    "load_config",
    "rewrite_markup",
    "rewrite_script",
    "rewrite_stylesheet",
]
