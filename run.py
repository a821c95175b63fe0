"""Entry point for the cache simulator.

Usage:
    python run.py -s 4 -E 1 -b 4 -t traces/yi.trace
    python run.py -v -s 1 -E 1 -b 1 -t traces/yi2.trace
"""
from csim.cli import main


if __name__ == '__main__':
    main(prog_name='csim')
