"""
Seismos: Multiscale Acoustic Wave Models

File: main.py
Description: Main solver class for Seismos. Loads and validates the input,
             sets up the grid, media and model components and runs the
             time integration loop with snapshot and seismogram output.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
import copy
import importlib
import time

import toml

from Seismos.context import Context
from Seismos.defaults import default_config
from Seismos.validation import validate_config, validate_component_name
from Seismos.grid.cartesian import CartesianGrid
from Seismos.parallel.comm import get_mpi_context
from Seismos.fem.source import source_time_series
from Seismos.output.snapshots import SnapshotWriter
from Seismos.output.matrices import MatrixWriter
from Seismos.profiling import timer
from Seismos.banner import print_banner
from Seismos.errors import ConfigurationError
from Seismos.logging import get_logger
import Seismos.format as fmt

logger = get_logger(__name__)

# Command line options that override the [options] table when given
OVERRIDES = ('output_dir', 'print_matrices', 'reference_fine')


def merge(base, override):
    """Recursively update nested dictionaries, returning a new dictionary."""
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = merge(out[key], value)
        else:
            out[key] = value
    return out


class Seismos():
    """
    args: dictionary with either 'input' (path of a TOML file) or 'config'
          (an already parsed dictionary), plus optional command line
          overrides (output_dir, print_matrices, reference_fine).
    comm: communicator, COMM_WORLD when mpi4py is available.
    """
    def __init__(self, args, comm=None):
        self.mpi = get_mpi_context(comm)

        # Print Seismos banner
        print_banner(self.mpi.rank)

        # Load and validate input
        config = args.get('config')
        if config is None:
            config = self.load_input(args['input'])
        state, params, options = self.merge_defaults(config)
        options.update({k: args[k] for k in OVERRIDES if args.get(k) not in (None, False)})
        params, options = validate_config(params, options)

        # Create context object
        self.ctx = Context(state, params, options)
        s, p, o = self.ctx
        s.mpi = self.mpi
        s.n_steps = int(p.T / p.dt + 0.5)

        # Recorders are called with (step, time, fine field) every step_seis steps
        self.recorders = []

        # Initialize solver components
        # The order matters: the media reads the grid, the model reads both
        with timer.time_section("Setup", "Grid"):
            s.grid = CartesianGrid.from_context(self.ctx)
        with timer.time_section("Setup", "Media"):
            self.media = self.load_component('media', o.media)
        self.model = self.load_component('model', o.model)

    def load_input(self, path):
        # Load TOML input file
        try:
            with open(path, 'r') as f:
                return toml.load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read input file {path}: {e}") from e
        except toml.TomlDecodeError as e:
            raise ConfigurationError(f"Malformed input file {path}: {e}") from e

    def merge_defaults(self, config):
        # Load defaults
        state, params, options = default_config()

        # Update params and options with custom values
        params = merge(params, config.get('parameters', {}))
        options = merge(options, config.get('options', {}))
        return state, params, options

    def load_component(self, comp, cls_name):
        validate_component_name(cls_name)

        module, cls = cls_name.split('.')
        try:
            module = importlib.import_module(f"Seismos.{comp}.{module}")
            cls = getattr(module, cls)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(f"Unknown {comp} component '{cls_name}'") from e
        return cls(self.ctx)

    def add_recorder(self, recorder):
        self.recorders.append(recorder)

    def write_snapshot(self, writer, cycle, t):
        with timer.time_section("Time Loop", "Snapshots"):
            writer.write(cycle, t, self.model.fields())

    def solve(self):
        # Read context
        s, p, o = self.ctx
        n_steps = s.n_steps

        logger.info("Starting simulation...")
        logger.info(f"Number of time steps: {n_steps}, dt = {fmt.s2str(p.dt)}, T = {fmt.s2str(p.T)}")

        # Time dependent part of the source
        source = source_time_series(p.source.frequency, p.dt, n_steps)

        # Only root writes the replicated fields
        writer = SnapshotWriter(o.output_dir, self.model.name + o.extra_string,
                                enabled=o.write_snapshots and self.mpi.is_root)
        if o.print_matrices:
            matrices = MatrixWriter(o.output_dir, enabled=True)
            self.model.write_matrices(matrices)
            matrices.summary()

        self.write_snapshot(writer, 0, 0.0)

        # Main time integration loop
        logger.info("Starting time integration loop...")
        tenth = max(n_steps // 10, 1)

        start = time.time()
        for step in range(1, n_steps + 1):
            # 1) Advance the pressure
            with timer.time_section("Time Loop", "Time step"):
                self.model.step(self.ctx, source[step - 1])

            # 2) Update time
            s.step = step
            s.time = step * p.dt

            # 3) Report progress
            if step % tenth == 0:
                norms = ", ".join(f"||{k}|| = {v:.6e}" for k, v in self.model.norms().items())
                logger.info(f"step {step} / {n_steps}, t = {fmt.s2str(s.time)}, {norms}")

            # 4) Write Data
            if step % p.step_snap == 0:
                self.write_snapshot(writer, step, s.time)

            if self.recorders and step % p.step_seis == 0:
                with timer.time_section("Time Loop", "Seismograms"):
                    field = self.model.fine_field()
                    for recorder in self.recorders:
                        recorder(step, s.time, field)

        # End of time integration loop
        end = time.time()
        logger.info("Time loop complete!")

        # Finalize media and model
        self.media.finalize(self.ctx)
        self.model.finalize(self.ctx)

        for stats in self.model.solver_stats():
            stats.summary()
        timer.report()
        logger.info(f"Total time loop runtime {end-start:.4f} seconds.")
        return self.model
