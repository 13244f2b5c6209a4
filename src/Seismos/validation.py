"""
Seismos: Multiscale Acoustic Wave Models

File: validation.py
Description: Pydantic models validating the parameters and options read from
             the input file before any assembly takes place.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""

import re
from typing import List, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from Seismos.errors import ConfigurationError

BoundaryKind = Literal["free", "rigid"]

# "module.Class" component names
COMPONENT_PATTERN = r"^[a-zA-Z_]\w*\.[a-zA-Z_]\w*$"


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class GridParameters(StrictModel):
    sx: float = Field(..., gt=0.0)
    sy: float = Field(..., gt=0.0)
    sz: float = Field(..., gt=0.0)
    nx: int = Field(..., gt=0)
    ny: int = Field(..., gt=0)
    nz: int = Field(..., gt=0)


class SourceParameters(StrictModel):
    x: float
    y: float
    z: float
    frequency: float = Field(..., gt=0.0)
    scale: float
    spatial_function: Literal["delta", "gauss"]
    gauss_support: float = Field(..., gt=0.0)
    plane_wave: bool


class Layer(StrictModel):
    top: float                      # depth of the top of the layer below y = sy
    rho: float = Field(..., gt=0.0)
    vp: float = Field(..., gt=0.0)


class MediaParameters(StrictModel):
    rho: float = Field(..., gt=0.0)
    vp: float = Field(..., gt=0.0)
    layers: List[Layer]
    perturbation: float = Field(..., ge=0.0, lt=1.0)
    seed: int


class BoundaryParameters(StrictModel):
    left: BoundaryKind
    right: BoundaryKind
    bottom: BoundaryKind
    top: BoundaryKind
    front: BoundaryKind
    back: BoundaryKind

    @field_validator("*", mode="before")
    @classmethod
    def reject_absorbing(cls, value):
        if value == "abs":
            raise ValueError("absorbing boundaries ('abs') are not supported, use 'free' or 'rigid'")
        return value


class MethodParameters(StrictModel):
    order: int = Field(..., ge=1)
    dg_sigma: float
    dg_kappa: float = Field(..., ge=0.0)
    basis: Literal["cg", "dg"]
    gms_Nx: int = Field(..., gt=0)
    gms_Ny: int = Field(..., gt=0)
    gms_Nz: int = Field(..., gt=0)
    n_boundary_basis: int = Field(..., ge=0)
    n_interior_basis: int = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_basis_size(self) -> Self:
        if self.n_boundary_basis + self.n_interior_basis == 0:
            raise ValueError("at least one multiscale basis function per block is required")
        return self


class SimulationParameters(StrictModel):
    dimension: Literal[2, 3]
    T: float = Field(..., gt=0.0)
    dt: float = Field(..., gt=0.0)
    step_snap: int = Field(..., gt=0)
    step_seis: int = Field(..., gt=0)
    grid: GridParameters
    source: SourceParameters
    media: MediaParameters
    boundary: BoundaryParameters
    method: MethodParameters

    @model_validator(mode="after")
    def validate_time(self) -> Self:
        if self.dt >= self.T:
            raise ValueError(f"dt ({self.dt}) must be < T ({self.T})")
        return self

    @model_validator(mode="after")
    def validate_partition(self) -> Self:
        fine = fine_counts(self)
        coarse = coarse_counts(self)
        for axis, (nf, nc) in zip("xyz", zip(fine, coarse)):
            if nc > nf:
                raise ValueError(f"number of coarse blocks in {axis} ({nc}) exceeds "
                                 f"number of fine cells ({nf})")
        return self

    @model_validator(mode="after")
    def validate_modes(self) -> Self:
        # Imported here to keep the validation module free of numerical imports
        from Seismos.model.gmsfem.local_basis import available_modes

        # The smallest block carries the fewest modes
        shape = tuple(nf // nc for nf, nc in zip(fine_counts(self), coarse_counts(self)))
        if min(shape) == 0:
            raise ValueError(f"coarse partition leaves empty blocks {shape}")
        n_bdr, n_int = available_modes(shape, self.method.order, self.method.basis)
        m = self.method
        if m.n_boundary_basis > n_bdr:
            raise ValueError(f"n_boundary_basis ({m.n_boundary_basis}) exceeds the {n_bdr} "
                             f"boundary modes available in the smallest coarse block {shape}")
        if m.n_interior_basis > n_int:
            raise ValueError(f"n_interior_basis ({m.n_interior_basis}) exceeds the {n_int} "
                             f"interior modes available in the smallest coarse block {shape}")
        return self


class RuntimeOptions(BaseModel):
    # Unknown options are allowed, they may be read by custom components
    model_config = ConfigDict(extra="allow")

    media: str = Field(..., pattern=COMPONENT_PATTERN)
    model: str = Field(..., pattern=COMPONENT_PATTERN)
    output_dir: str
    extra_string: str
    write_snapshots: bool
    print_matrices: bool
    reference_fine: bool
    verify_dof_map: bool


def fine_counts(params):
    g = params.grid
    return (g.nx, g.ny, g.nz)[:params.dimension]


def coarse_counts(params):
    m = params.method
    return (m.gms_Nx, m.gms_Ny, m.gms_Nz)[:params.dimension]


def _format_errors(err: ValidationError):
    lines = []
    for e in err.errors():
        loc = ".".join(str(l) for l in e["loc"]) or "<root>"
        lines.append(f"  {loc}: {e['msg']}")
    return "\n".join(lines)


def validate_config(params: dict, options: dict):
    """
    Validate the merged parameters and options.

    Returns plain dictionaries with normalized types.
    Raises ConfigurationError listing every invalid entry.
    """
    try:
        p = SimulationParameters.model_validate(params)
    except ValidationError as err:
        raise ConfigurationError("Invalid parameters:\n" + _format_errors(err)) from err

    try:
        o = RuntimeOptions.model_validate(options)
    except ValidationError as err:
        raise ConfigurationError("Invalid options:\n" + _format_errors(err)) from err

    return p.model_dump(), o.model_dump()


def validate_component_name(name: str):
    if not re.match(COMPONENT_PATTERN, name):
        raise ConfigurationError(f"Invalid component name '{name}'. Please use 'module.Class' format.")
