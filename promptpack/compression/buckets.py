"""Semantic bucket classification for notebook cells.

Implements weighted keyword scoring. Each bucket has a family of patterns and
a weight; every pattern that matches anywhere in the lower-cased cell adds the
family weight once. The highest total wins, ties go to the bucket listed first
in ``BUCKET_ORDER``, and a cell without any match is ``Bucket.OTHER``.
"""

import re
from enum import Enum


class Bucket(str, Enum):
    SETUP = "setup"
    DATA_ACQUISITION = "data_acquisition"
    DATASET_BUILD = "dataset_build"
    TRAINING_INVOCATION = "training_invocation"
    CHECKPOINT_HANDLING = "checkpoint_handling"
    MODEL_LOAD = "model_load"
    INFERENCE_API = "inference_api"
    EVALUATION = "evaluation"
    PLOTTING = "plotting"
    DEBUG_EXPERIMENTS = "debug_experiments"
    OTHER = "other"

    @property
    def label(self) -> str:
        return BUCKET_LABELS[self]


BUCKET_LABELS: dict[Bucket, str] = {
    Bucket.SETUP: "Setup",
    Bucket.DATA_ACQUISITION: "Data Acquisition",
    Bucket.DATASET_BUILD: "Dataset Build",
    Bucket.TRAINING_INVOCATION: "Training Invocation",
    Bucket.CHECKPOINT_HANDLING: "Checkpoint Handling",
    Bucket.MODEL_LOAD: "Model Load",
    Bucket.INFERENCE_API: "Inference API",
    Bucket.EVALUATION: "Evaluation",
    Bucket.PLOTTING: "Plotting",
    Bucket.DEBUG_EXPERIMENTS: "Debug Experiments",
    Bucket.OTHER: "Other",
}

# Tie-break order: earlier wins
BUCKET_ORDER: tuple[Bucket, ...] = tuple(Bucket)


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p) for p in patterns)


# (patterns, weight) per bucket; matched against lower-cased text
BUCKET_PATTERNS: dict[Bucket, tuple[tuple[re.Pattern[str], ...], int]] = {
    Bucket.SETUP: (
        _compile(
            r"!pip\b",
            r"pip install",
            r"git clone",
            r"apt-get",
            r"conda install",
            r"!apt\b",
            r"!sudo\b",
        ),
        4,
    ),
    Bucket.DATA_ACQUISITION: (
        _compile(
            r"wget\b",
            r"curl\b",
            r"gdown\b",
            r"gsutil\b",
            r"kaggle\b",
            r"download\b",
            r"\.parquet\b",
            r"\.csv\b",
            r"\.jsonl\b",
            r"\.tsv\b",
            r"https?://",
        ),
        3,
    ),
    Bucket.DATASET_BUILD: (
        _compile(
            r"dataset\b",
            r"dataloader\b",
            r"tokenizer\b",
            r"tokenize\b",
            r"build_dataset\b",
            r"prepare_dataset\b",
            r"augment\b",
            r"np\.save\b",
            r"to_json\b",
        ),
        3,
    ),
    Bucket.TRAINING_INVOCATION: (
        _compile(
            r"train\b",
            r"trainer\b",
            r"fit\b",
            r"optimizer\b",
            r"backward\b",
            r"epochs?\b",
        ),
        3,
    ),
    Bucket.CHECKPOINT_HANDLING: (
        _compile(
            r"checkpoint\b",
            r"state_dict\b",
            r"load_state_dict\b",
            r"torch\.save\b",
            r"torch\.load\b",
            r"ckpt\b",
        ),
        3,
    ),
    Bucket.MODEL_LOAD: (
        _compile(
            r"from_pretrained\b",
            r"automodel\b",
            r"autotokenizer\b",
            r"load_model\b",
            r"load_pretrained\b",
        ),
        3,
    ),
    Bucket.INFERENCE_API: (
        _compile(
            r"predict\b",
            r"inference\b",
            r"generate\b",
            r"forward\b",
            r"no_grad\b",
            r"logits\b",
            r"softmax\b",
        ),
        2,
    ),
    Bucket.EVALUATION: (
        _compile(
            r"eval\b",
            r"accuracy\b",
            r"topk\b",
            r"metric\b",
            r"precision\b",
            r"recall\b",
        ),
        3,
    ),
    Bucket.PLOTTING: (
        _compile(r"plot\b", r"matplotlib\b", r"seaborn\b", r"plt\."),
        3,
    ),
    Bucket.DEBUG_EXPERIMENTS: (
        _compile(
            r"print\b",
            r"inspect\b",
            r"pdb\b",
            r"assert\b",
            r"debug\b",
            r"logits\b",
        ),
        1,
    ),
}


def score_buckets(code: str) -> dict[Bucket, int]:
    """Sum the weights of matching patterns per bucket (only non-zero scores)."""
    text = code.lower()
    scores: dict[Bucket, int] = {}
    for bucket, (patterns, weight) in BUCKET_PATTERNS.items():
        total = sum(weight for pattern in patterns if pattern.search(text))
        if total:
            scores[bucket] = total
    return scores


def classify_bucket(code: str) -> Bucket:
    """Assign the highest-scoring bucket, earliest in ``BUCKET_ORDER`` on ties."""
    scores = score_buckets(code)
    best, best_score = Bucket.OTHER, 0
    for bucket in BUCKET_ORDER:
        score = scores.get(bucket, 0)
        if score > best_score:
            best, best_score = bucket, score
    return best
