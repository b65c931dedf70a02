# seqassign/cli/main.py
import argparse
import json
import sys
from typing import List, Optional

from ..config import ConfigManager
from ..core.logging_config import LoggingManager
from ..error_handlers import handle_exceptions
from ..exceptions import ValidationError
from ..pipelines import ClassificationPipeline, JoinPipeline, SubsequencePipeline
from ..utils.sequence import read_sequences


def create_parser() -> argparse.ArgumentParser:
    # Create the top-level parser
    parser = argparse.ArgumentParser(description='Sequence classification and seed alignment joining')

    # Global options
    parser.add_argument('--config', type=str, help='Path to configuration file')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase verbosity (can be used multiple times)')
    parser.add_argument('--log-file', type=str,
                        help='Log to file in addition to stdout')
    parser.add_argument('--log-dir', type=str,
                        help='Directory for log files')
    parser.add_argument('--json', action='store_true',
                        help='Output results as JSON')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Classification command
    classify_parser = subparsers.add_parser('classify', help='Assign sequences to models from search hits')
    classify_parser.add_argument('--hits', type=str, required=True,
                                 help='Hit stream (or nhmmscan tblout with --hits-format tblout)')
    classify_parser.add_argument('--hits-format', choices=['stream', 'tblout'], default='stream',
                                 help='Format of the hits file')
    classify_parser.add_argument('--fasta', type=str, required=True,
                                 help='FASTA file of the searched sequences')
    classify_parser.add_argument('--out-dir', type=str,
                                 help='Output directory (default: paths.output_dir)')
    classify_parser.add_argument('--prefix', type=str,
                                 help='Output file prefix (default: FASTA base name)')

    # Subsequence selection command
    subseq_parser = subparsers.add_parser('subseqs', help='Select flank subsequences for realignment')
    subseq_parser.add_argument('--indel', type=str, required=True, help='Indel file of the model')
    subseq_parser.add_argument('--fasta', type=str, required=True, help='FASTA file of the full sequences')
    subseq_parser.add_argument('--model', type=str, required=True, help='Model name')
    subseq_parser.add_argument('--out-dir', type=str, help='Output directory (default: paths.output_dir)')
    subseq_parser.add_argument('--overhang', type=int, help='Overhang into the seed region')

    # Join command
    join_parser = subparsers.add_parser('join', help='Join flank alignments with seed regions')
    join_parser.add_argument('--fasta', type=str, required=True, help='FASTA file of the full sequences')
    join_parser.add_argument('--indel', type=str, required=True, help='Indel file of the model')
    join_parser.add_argument('--model', type=str, required=True, help='Model name')
    join_parser.add_argument('--model-length', type=int, help='Model length (default: from the indel file)')
    join_parser.add_argument('--stk5', type=str, help="Stockholm alignment of the 5' flanks")
    join_parser.add_argument('--stk3', type=str, help="Stockholm alignment of the 3' flanks")
    join_parser.add_argument('--consensus', type=str,
                             help='FASTA file holding the model consensus sequence')
    join_parser.add_argument('--overhang', type=int, help='Overhang used when selecting subsequences')
    join_parser.add_argument('--out', type=str, required=True, help='Stockholm output file')

    return parser


def _read_consensus(fasta_path: str, model: str) -> str:
    sequences = read_sequences(fasta_path)
    if model in sequences:
        return sequences[model]
    if len(sequences) == 1:
        return next(iter(sequences.values()))
    raise ValidationError(f"No consensus named {model} in {fasta_path}")


@handle_exceptions(exit_on_error=False)
def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Load configuration
    config_manager = ConfigManager(args.config)

    logger = LoggingManager.configure(
        verbose=args.verbose > 0,
        log_file=args.log_file,
        log_dir=args.log_dir,
        component="seqassign",
        config=config_manager.config
    )
    logger.debug(f"Command line arguments: {vars(args)}")
    out_dir = getattr(args, 'out_dir', None) or config_manager.get_path('output_dir', '.')

    if args.command == 'classify':
        pipeline = ClassificationPipeline(config_manager)
        decisions = pipeline.run(args.hits, args.fasta, out_dir,
                                 hits_format=args.hits_format, prefix=args.prefix)
        if args.json:
            print(json.dumps([d.to_dict() for d in decisions], indent=2))
        else:
            passed = sum(1 for d in decisions if d.passed)
            print(f"Classified {len(decisions)} sequences: {passed} PASS, {len(decisions) - passed} FAIL")
            print(f"Decision table: {pipeline.output_files['decisions']}")

    elif args.command == 'subseqs':
        pipeline = SubsequencePipeline(config_manager)
        specs = pipeline.run(args.indel, args.fasta, args.model, out_dir, overhang=args.overhang)
        if args.json:
            print(json.dumps([{'name': s.name, 'start': s.start, 'stop': s.stop, 'source': s.source,
                               'side': s.side.value} for s in specs], indent=2))
        else:
            print(f"Selected {len(specs)} subsequences: {pipeline.output_files['subseq_fasta']}")

    elif args.command == 'join':
        consensus = _read_consensus(args.consensus, args.model) if args.consensus else None
        stockholm_paths = [path for path in (args.stk5, args.stk3) if path]
        pipeline = JoinPipeline(config_manager)
        results = pipeline.run(args.fasta, args.indel, args.model, args.out,
                               stockholm_paths=stockholm_paths, model_length=args.model_length,
                               consensus=consensus, overhang=args.overhang)
        unjoinable = [r for r in results if r.boundary_mismatch]
        if args.json:
            print(json.dumps([{'name': r.name, 'joined': r.joined, 'message': r.message}
                              for r in results], indent=2))
        else:
            print(f"Joined {len(results) - len(unjoinable)} of {len(results)} sequences: {args.out}")
            for result in unjoinable:
                print(f"  {result.name}: {result.message}")

    logger.info(f"Command {args.command} completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
