"""
Seismos: Multiscale Acoustic Wave Models

File: banner.py
Description: Banner to be printed at the start of the simulation.

Author: Marcel Ferrari
Copyright (c) 2025 Marcel Ferrari.

This Source Code Form is subject to the terms of the Mozilla Public
License, v. 2.0. If a copy of the MPL was not distributed with this
file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""
import termcolor

banner = termcolor.colored(r"""
 ____  _____ ___ ____  __  __  ___  ____  
/ ___|| ____|_ _/ ___||  \/  |/ _ \/ ___| 
\___ \|  _|  | |\___ \| |\/| | | | \___ \ 
 ___) | |___ | | ___) | |  | | |_| |___) |
|____/|_____|___|____/|_|  |_|\___/|____/  (v0.1)
""", 'cyan', attrs=['bold'])

def print_banner(rank=0):
    # Only the root process prints the banner
    if rank == 0:
        print(banner)


if __name__ == '__main__':
    print_banner()
