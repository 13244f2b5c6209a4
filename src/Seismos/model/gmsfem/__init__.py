from Seismos.model.gmsfem.model import MultiscaleAcoustic
