# -- Export Package -- #

'''
Data export utilities for sandbox runs.

Exports frame data as JSON for an external renderer.
'''

from FluidSandbox.export.frameExporter import FrameExporter
