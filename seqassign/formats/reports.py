#!/usr/bin/env python3
"""
Tabular classification reports built with pandas.
"""

import os
import logging
from typing import Iterable

import pandas as pd

from ..models.scores import ClassificationDecision
from ..utils.file import ensure_dir

logger = logging.getLogger("seqassign.formats.reports")

DECISION_COLUMNS = [
    'sequence', 'model', 'strand', 'outcome', 'features', 'score', 'bits_per_nt',
    'runner_up', 'diff_per_nt', 'coverage', 'bias', 'nhits',
]


def decisions_to_frame(decisions: Iterable[ClassificationDecision]) -> pd.DataFrame:
    """One row per decision, in decision order"""
    df = pd.DataFrame([d.to_dict() for d in decisions], columns=DECISION_COLUMNS)
    return df


def summarize_decisions(df: pd.DataFrame) -> pd.DataFrame:
    """Sequence counts per assigned model and outcome"""
    if df.empty:
        return pd.DataFrame(columns=['model', 'PASS', 'FAIL', 'total'])
    summary = (df.groupby(['model', 'outcome']).size()
                 .unstack(fill_value=0)
                 .reindex(columns=['PASS', 'FAIL'], fill_value=0))
    summary['total'] = summary['PASS'] + summary['FAIL']
    return summary.reset_index()


def write_decision_table(decisions: Iterable[ClassificationDecision], output_path: str) -> pd.DataFrame:
    """Write the decision table as TSV and return it"""
    df = decisions_to_frame(decisions)
    ensure_dir(os.path.dirname(output_path))
    df.to_csv(output_path, sep='\t', index=False, na_rep='-')
    logger.info(f"Wrote {len(df)} classification decisions to {output_path}")
    return df


def write_outcome_summary(df: pd.DataFrame, output_path: str) -> pd.DataFrame:
    """Write per-model PASS/FAIL counts of a decision table as TSV and return them"""
    summary = summarize_decisions(df)
    ensure_dir(os.path.dirname(output_path))
    summary.to_csv(output_path, sep='\t', index=False)
    logger.info(f"Wrote outcome counts for {len(summary)} models to {output_path}")
    return summary
