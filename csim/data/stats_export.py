"""Statistics and exporter.
"""
import csv
import json
import os
import time
from typing import Dict, List

from csim.core.cache import Outcome


class Statistics:
    def __init__(self, history_limit: int = 4096):
        self.history_limit = max(2, int(history_limit))
        self.reset()

    def reset(self):
        # counters start from zero
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.records: Dict[str, int] = {}
        # hit rate after every `history_stride`-th trace record, starting at record 0
        self.hit_rate_history: List[float] = []
        self.history_stride = 1
        self.start_time = time.time()

    def record_access(self, outcome: Outcome):
        # simple counter update: call this for every cache access
        if outcome.is_hit:
            self.hits += 1
        else:
            self.misses += 1
        if outcome.evicted:
            self.evictions += 1

    def record_trace_entry(self, kind: str):
        # called once per trace record, after its accesses were recorded
        index = self.trace_entries
        self.records[kind] = self.records.get(kind, 0) + 1
        if index % self.history_stride == 0:
            self.hit_rate_history.append(self.hit_rate)
            if len(self.hit_rate_history) > self.history_limit:
                # halve the resolution so memory stays bounded on long traces
                self.hit_rate_history = self.hit_rate_history[::2]
                self.history_stride *= 2

    @property
    def trace_entries(self):
        return sum(self.records.values())

    @property
    def history_positions(self) -> List[int]:
        """Trace record index of each hit_rate_history sample."""
        return [i * self.history_stride for i in range(len(self.hit_rate_history))]

    @property
    def accesses(self):
        return self.hits + self.misses

    @property
    def hit_rate(self):
        return (self.hits / self.accesses) if self.accesses else 0.0

    @property
    def miss_rate(self):
        return (self.misses / self.accesses) if self.accesses else 0.0

    @property
    def elapsed(self):
        return time.time() - self.start_time

    def summary(self) -> str:
        return f"hits:{self.hits} misses:{self.misses} evictions:{self.evictions}"

    def as_dict(self) -> Dict[str, object]:
        return {
            'hits': self.hits,
            'misses': self.misses,
            'evictions': self.evictions,
            'accesses': self.accesses,
            'hit_rate': self.hit_rate,
            'miss_rate': self.miss_rate,
            'records': dict(self.records),
        }


class Exporter:
    @staticmethod
    def export_stats_csv(path: str, stats: Statistics):
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['hits', 'misses', 'evictions', 'accesses', 'hit_rate', 'miss_rate'])
            writer.writerow([
                stats.hits, stats.misses, stats.evictions, stats.accesses,
                stats.hit_rate, stats.miss_rate,
            ])

    @staticmethod
    def export_stats_json(path: str, stats: Statistics):
        data = stats.as_dict()
        data['hit_rate_history'] = list(stats.hit_rate_history)
        data['history_stride'] = stats.history_stride
        with open(path, 'w', encoding='utf-8') as fh:
            json.dump(data, fh, indent=2)

    @staticmethod
    def export_chart_pdf(path: str, stats: Statistics):
        """Render the hit-rate history to a PDF using matplotlib and save it."""
        import matplotlib
        matplotlib.use('Agg')
        import matplotlib.pyplot as plt

        data = list(stats.hit_rate_history) or [0]
        xs = stats.history_positions or [0]
        fig, ax = plt.subplots(figsize=(6, 2))
        ax.plot(xs, data, color='#FFA500', linewidth=2)
        ax.fill_between(xs, data, color='#FFA500', alpha=0.1)
        ax.set_ylim(0, 1)
        ax.set_xlabel('Trace record')
        ax.set_ylabel('Hit rate')
        ax.set_title(stats.summary(), fontsize=8)
        ax.grid(False)
        fig.tight_layout()
        fig.savefig(path, format='pdf', dpi=150)
        plt.close(fig)

    @classmethod
    def export(cls, path: str, stats: Statistics) -> str:
        """Write `stats` in the format picked by the file suffix."""
        ext = os.path.splitext(path)[1].lower()
        if ext == '.csv':
            cls.export_stats_csv(path, stats)
        elif ext == '.json':
            cls.export_stats_json(path, stats)
        elif ext == '.pdf':
            cls.export_chart_pdf(path, stats)
        else:
            raise ValueError(f"unsupported export format {ext or path!r} (use .csv, .json or .pdf)")
        return path
