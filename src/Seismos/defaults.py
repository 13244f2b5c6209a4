def default_config():
    # Create a default configuration
    default_state = {
        'time' : 0.0,
        'step' : 0,
    }

    default_params = {
        'dimension' : 2,
        'T' : 1.0,            # simulation time, s
        'dt' : 1e-3,          # time step, s
        'step_snap' : 1000,   # snapshot every step_snap time steps
        'step_seis' : 1,      # seismogram every step_seis time steps
        'grid' : {
            'sx' : 1000.0, 'sy' : 1000.0, 'sz' : 1000.0, # domain size, m
            'nx' : 40, 'ny' : 40, 'nz' : 40,             # number of fine cells
        },
        'source' : {
            'x' : 500.0, 'y' : 500.0, 'z' : 500.0,
            'frequency' : 10.0,
            'scale' : 1e6,
            'spatial_function' : 'gauss',
            'gauss_support' : 10.0,
            'plane_wave' : False,
        },
        'media' : {
            'rho' : 2500.0,       # kg/m^3
            'vp' : 3500.0,        # m/s
            'layers' : [],
            'perturbation' : 0.0,
            'seed' : 0,
        },
        'boundary' : {
            'left' : 'free', 'right' : 'free',
            'bottom' : 'free', 'top' : 'free',
            'front' : 'free', 'back' : 'free',
        },
        'method' : {
            'order' : 1,
            'dg_sigma' : -1.0,    # symmetric interior penalty
            'dg_kappa' : 1.0,
            'basis' : 'cg',
            'gms_Nx' : 4, 'gms_Ny' : 4, 'gms_Nz' : 4,
            'n_boundary_basis' : 4,
            'n_interior_basis' : 4,
        },
    }

    default_options = {
        'media' : 'homogeneous.HomogeneousMedia',
        'model' : 'gmsfem.MultiscaleAcoustic',
        'output_dir' : 'output',
        'extra_string' : '',
        'write_snapshots' : True,
        'print_matrices' : False,
        'reference_fine' : False,
        'verify_dof_map' : False,
    }

    return default_state, default_params, default_options
