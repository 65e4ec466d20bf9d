# -- Visualization Package -- #

'''
Plotly diagnostics for recorded sandbox runs.
'''

from FluidSandbox.visualization.diagnosticsPlots import (
    plotBodyHeights,
    plotEnergyHistory,
    writeDiagnosticsReport,
)
