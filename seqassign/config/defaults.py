#!/usr/bin/env python3
"""
Default configuration values for seqassign
"""

DEFAULT_CONFIG = {
    'paths': {
        'output_dir': './output',
    },
    'search': {
        # HSPs scoring below this are dropped while parsing the hit stream
        'min_bitscore': 50.0,
    },
    'classification': {
        'lowscore': 0.3,
        'verylowscore': 0.2,
        'lowdiff': 0.06,
        'verylowdiff': 0.006,
        'highbias': 0.25,
        'lowcov': 0.9,
        'lowscore_min_length': 0,
        'lowdiff_min_length': 0,
        'allow_lowscore': False,
        'allow_verylowscore': False,
        'allow_lowdiff': False,
        'allow_verylowdiff': False,
        'minus_strand_fail': True,
        'highbias_fail': False,
        'lowcov_fail': False,
    },
    'alignment': {
        'overhang': 100,
        'ungapped_marker': 'x',
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    },
}
