import os

import numpy as np
import toml
import matplotlib.pyplot as plt
import matplotlib.animation as anim
import tqdm

# Grid of input.toml
config = toml.load('input.toml')
grid = config['parameters']['grid']
nx, ny = grid['nx'], grid['ny']
extent = [0, grid['sx'], 0, grid['sy']]

# Snapshot index written by the solver
directory = os.path.join(config['options'].get('output_dir', 'output'), 'snapshots')
index = toml.load(os.path.join(directory, 'GMsFEM.toml'))
entries = index['snapshots']
print(f'Found {len(entries)} snapshots')

def cell_average(u):
    # DOFs are stored cell by cell, x fastest
    return u.reshape(nx * ny, -1).mean(axis=1).reshape(ny, nx)

frames = []
for e in entries:
    with np.load(os.path.join(directory, e['file'])) as data:
        frames.append((e['time'], cell_average(data['coarse_pressure']),
                       cell_average(data['fine_pressure'])))

vmax = max(np.abs(f[2]).max() for f in frames) or 1.0

fig, axs = plt.subplots(1, 3, figsize=(15, 5))

framezero = True
pbar = tqdm.tqdm(total=len(frames), desc='Animating snapshots', unit='frame')
def animate(i):
    global framezero

    t, coarse, fine = frames[i]
    images = []
    for ax, field, title in zip(axs, (coarse, fine, coarse - fine),
                                ('GMsFEM pressure', 'Fine DG pressure', 'Difference')):
        images.append(ax.imshow(field, origin='lower', extent=extent,
                                cmap='seismic', vmin=-vmax, vmax=vmax))
        ax.set_title(title)
        ax.set_xlabel('x [m]')
        ax.set_ylabel('y [m]')

    if framezero:
        for ax, im in zip(axs, images):
            fig.colorbar(im, ax=ax)
        plt.tight_layout()
        framezero = False
    fig.suptitle(f't = {t:.4f} s')

    pbar.update(1)
    pbar.set_postfix(frame=i)

ani = anim.FuncAnimation(fig, animate, frames=len(frames), interval=100)
ani.save('animation.mp4', writer='ffmpeg', fps=10)
