"""
Seismos: Multiscale Acoustic Wave Models

File: timer.py
Description: Simple timer class to profile the setup phases and the time loop.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import time
from collections import OrderedDict
from tabulate import tabulate
from Seismos.logging import get_logger

logger = get_logger(__name__)

class Timer:
    def __init__(self):
        self.data = OrderedDict()

    def start(self, category, operation):
        if category not in self.data:
            self.data[category] = {'total': 0, 'operations': OrderedDict()}
        ops = self.data[category]['operations']
        if operation not in ops:
            ops[operation] = {'start': None, 'elapsed': 0, 'calls': 0}

        ops[operation]['start'] = time.perf_counter()

    def stop(self, category, operation):
        if category in self.data and operation in self.data[category]['operations']:
            op_data = self.data[category]['operations'][operation]
            start = op_data['start']
            if start is not None:
                elapsed = time.perf_counter() - start
                op_data['elapsed'] += elapsed
                op_data['calls'] += 1
                self.data[category]['total'] += elapsed
                op_data['start'] = None

    def report(self):
        """Log a table with the timings for each category and operation."""
        logger.info("Performance Report:")
        for category, cat_data in self.data.items():
            total_cat_time = cat_data['total']
            logger.info(f"{category}")

            # Operations sorted by elapsed time (descending)
            table_data = []
            sorted_operations = sorted(
                cat_data['operations'].items(),
                key=lambda x: x[1]['elapsed'],
                reverse=True
            )

            for operation, op_data in sorted_operations:
                op_time = op_data['elapsed']
                percentage = (op_time / total_cat_time) * 100 if total_cat_time > 0 else 0
                table_data.append([operation, op_data['calls'], f"{op_time:.4f} sec", f"{percentage:.2f}%"])
            else: # Append total time to the end of the table
                table_data.append(["Total", "", f"{total_cat_time:.4f} sec", "100.00%"])

            logger.info("\n" + tabulate(table_data, headers=["Operation", "Calls", "Time", "Percentage"],
                                        tablefmt="simple"))

    def time_function(self, category, operation):
        def decorator(func):
            def wrapper(*args, **kwargs):
                with self.time_section(category, operation):
                    return func(*args, **kwargs)
            return wrapper
        return decorator

    def time_section(self, category, operation):
        class ProfileContextManager:
            def __init__(inner_self):
                inner_self.category = category
                inner_self.operation = operation

            def __enter__(inner_self):
                self.start(inner_self.category, inner_self.operation)
                return inner_self

            def __exit__(inner_self, exc_type, exc_value, traceback):
                self.stop(inner_self.category, inner_self.operation)

        return ProfileContextManager()
