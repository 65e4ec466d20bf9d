# -- Diagnostics Plot Tests -- #

'''
Plotly diagnostics built from recorded frames.
'''

import os

from FluidSandbox.export.frameExporter import FrameExporter
from FluidSandbox.simulation import SandboxSimulation
from FluidSandbox.visualization.diagnosticsPlots import (
    plotBodyHeights,
    plotEnergyHistory,
    writeDiagnosticsReport,
)


def _recordedRun(params, nSteps=6):
    simulation = SandboxSimulation(8)
    simulation.dropBody('sphere')
    simulation.dropBody('cube')
    exporter = FrameExporter()
    for _ in range(nSteps):
        exporter.addFrame(simulation.step(params))
    return exporter


def testEnergyHistoryTraces(params):
    exporter = _recordedRun(params)
    fig = plotEnergyHistory(exporter)

    assert len(fig.data) == 2
    assert len(fig.data[0].y) == 6
    assert len(fig.data[1].y) == 6


def testOneLinePerBody(params):
    exporter = _recordedRun(params)
    fig = plotBodyHeights(exporter, floorHeight=-5.0)

    assert [trace.name for trace in fig.data] == ['#0 sphere', '#1 cube']
    # Bodies start at the drop height and fall
    heights = fig.data[0].y
    assert heights[-1] < heights[0]


def testReportWritten(params, tempOutputDir):
    exporter = _recordedRun(params, nSteps=3)
    path = writeDiagnosticsReport(exporter, params, outputDir=str(tempOutputDir))

    assert os.path.exists(path)
    with open(path, 'r') as f:
        html = f.read()
    assert 'Rigid Body Heights' in html
