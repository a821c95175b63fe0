"""Command line entry point.

    csim [-hv] -s <num> -E <num> -b <num> -t <file>

Replays a valgrind memory trace against an LRU set-associative cache and
prints `hits:<n> misses:<n> evictions:<n>`.
"""
import logging

import click

from csim.data.stats_export import Exporter
from csim.data.trace import TraceFormatError
from csim.simulation import ConfigurationError, Simulation, SimulationConfig, format_verbose

USAGE = """\
Usage: {prog} [-hv] -s <num> -E <num> -b <num> -t <file>
Options:
  -h         Print this help message.
  -v         Optional verbose flag.
  -s <num>   Number of set index bits.
  -E <num>   Number of blocks per set (i.e. associativity).
  -b <num>   Number of block offset bits.
  -t <file>  Trace file.

Examples:
  linux>  {prog} -s 4 -E 1 -b 4 -t traces/yi.trace
  linux>  {prog} -v -s 8 -E 2 -b 4 -t traces/yi.trace"""


def print_usage(ctx, param, value):
    if not value or ctx.resilient_parsing:
        return
    click.echo(USAGE.format(prog=ctx.info_name))
    ctx.exit(0)


class UsageCommand(click.Command):
    """Reports bad options with the usage text and exit status 1."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            click.echo(f"{ctx.info_name}: {e.format_message()}", err=True)
            click.echo(USAGE.format(prog=ctx.info_name))
            ctx.exit(1)


@click.command(cls=UsageCommand, add_help_option=False)
@click.option('-h', '--help', is_flag=True, expose_value=False, is_eager=True, callback=print_usage,
              help='Print this help message.')
@click.option('-v', 'verbose', is_flag=True, help='Display trace info.')
@click.option('-s', 'set_bits', type=int, default=None, help='Number of set index bits (S = 2^s is the number of sets)')
@click.option('-E', 'associativity', type=int, default=None, help='Associativity (number of lines per set)')
@click.option('-b', 'block_bits', type=int, default=None, help='Number of block bits (B = 2^b is the block size)')
@click.option('-t', 'trace_file', type=str, default=None, help='Name of the valgrind trace to replay')
@click.option('--export', 'export_path', type=str, default=None,
              help='Also write statistics to a .json, .csv or .pdf file.')
@click.option('--debug', is_flag=True, help='Log debug messages, including the final cache contents.')
@click.pass_context
def main(ctx, verbose, set_bits, associativity, block_bits, trace_file, export_path, debug):
    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING,
                        format='%(levelname)s: %(message)s')

    config = SimulationConfig(set_bits=set_bits, associativity=associativity, block_bits=block_bits,
                              trace_file=trace_file, verbose=verbose)
    try:
        config.validate()
    except ConfigurationError:
        click.echo(f"{ctx.info_name}: Missing required command line argument")
        click.echo(USAGE.format(prog=ctx.info_name))
        ctx.exit(1)

    callback = None
    if config.verbose:
        def callback(info):
            line = format_verbose(info)
            if line is not None:
                click.echo(line)

    sim = Simulation(config)
    try:
        stats = sim.run_trace(callback)
    except OSError as e:
        click.echo(f"{trace_file}: {e.strerror or e}", err=True)
        ctx.exit(1)
    except TraceFormatError as e:
        click.echo(f"{trace_file}: {e}", err=True)
        ctx.exit(1)

    click.echo(stats.summary())

    if export_path:
        try:
            Exporter.export(export_path, stats)
        except (OSError, ValueError) as e:
            click.echo(f"{export_path}: {e}", err=True)
            ctx.exit(1)


if __name__ == '__main__':
    main()
