#!/usr/bin/env python3
"""
Configuration schema definition for validation
"""
from typing import Any, Dict, List, Optional

NUMBER = (int, float)
FRACTION = {'type': NUMBER, 'required': True, 'min': 0.0, 'max': 1.0}
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigSchema:
    """Configuration schema for validation

    Each field entry may give 'type', 'required', inclusive 'min'/'max'
    bounds, and 'choices' (compared case-insensitively for strings).
    """

    SCHEMA = {
        'paths': {
            'output_dir': {'type': str},
        },
        'search': {
            'min_bitscore': {'type': NUMBER, 'required': True, 'min': 0.0},
        },
        'classification': {
            # bits per nucleotide
            'lowscore': {'type': NUMBER, 'required': True, 'min': 0.0},
            'verylowscore': {'type': NUMBER, 'required': True, 'min': 0.0},
            'lowdiff': {'type': NUMBER, 'required': True, 'min': 0.0},
            'verylowdiff': {'type': NUMBER, 'required': True, 'min': 0.0},
            'highbias': FRACTION,
            'lowcov': dict(FRACTION, required=False),
            'lowscore_min_length': {'type': int, 'min': 0},
            'lowdiff_min_length': {'type': int, 'min': 0},
            'allow_lowscore': {'type': bool},
            'allow_verylowscore': {'type': bool},
            'allow_lowdiff': {'type': bool},
            'allow_verylowdiff': {'type': bool},
            'minus_strand_fail': {'type': bool},
            'highbias_fail': {'type': bool},
            'lowcov_fail': {'type': bool},
        },
        'alignment': {
            'overhang': {'type': int, 'required': True, 'min': 0},
            'ungapped_marker': {'type': str},
        },
        'logging': {
            'level': {'type': str, 'choices': LOG_LEVELS},
            'format': {'type': str},
        },
    }

    @staticmethod
    def _type_name(expected_type) -> str:
        if isinstance(expected_type, tuple):
            return " or ".join(t.__name__ for t in expected_type)
        return expected_type.__name__

    @classmethod
    def check_field(cls, name: str, value: Any, rules: Dict[str, Any]) -> Optional[str]:
        """Error message for one field value, or None when it conforms"""
        expected_type = rules.get('type')
        # bool is an int subclass; numeric fields must not accept it
        if expected_type is not None and (
                not isinstance(value, expected_type)
                or (isinstance(value, bool) and expected_type is not bool)):
            return (f"Invalid type for {name}: expected {cls._type_name(expected_type)}, "
                    f"got {type(value).__name__}")

        if 'min' in rules and value < rules['min']:
            return f"Value of {name} must be at least {rules['min']}, got {value}"
        if 'max' in rules and value > rules['max']:
            return f"Value of {name} must be at most {rules['max']}, got {value}"

        choices = rules.get('choices')
        if choices is not None:
            normalized = value.upper() if isinstance(value, str) else value
            if normalized not in choices:
                return f"Value of {name} must be one of {', '.join(map(str, choices))}, got {value!r}"
        return None

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> List[str]:
        """Validate configuration against schema

        Args:
            config: Configuration to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        for section, fields in cls.SCHEMA.items():
            section_config = config.get(section)
            if section_config is None:
                if any(rules.get('required', False) for rules in fields.values()):
                    errors.append(f"Missing required configuration section: {section}")
                continue
            if not isinstance(section_config, dict):
                errors.append(f"Configuration section {section} must be a mapping")
                continue

            for field, rules in fields.items():
                name = f"{section}.{field}"
                if field not in section_config:
                    if rules.get('required', False):
                        errors.append(f"Missing required configuration field: {name}")
                    continue
                error = cls.check_field(name, section_config[field], rules)
                if error:
                    errors.append(error)
        return errors
