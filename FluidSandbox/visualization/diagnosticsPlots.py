# -- Sandbox Diagnostics Plots -- #

'''
Plotly plots of a recorded run: fluid energy and speed over time, and
the height of every rigid body. All plots read the frames collected
by a FrameExporter, so they work on the same data a renderer gets.
'''

from __future__ import annotations

import os

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from FluidSandbox.export.frameExporter import FrameExporter
from FluidSandbox.sph.protocols import SimulationParameters
from FluidSandbox.visualization import theme


def _bodyTracks(frames: list[dict]) -> dict[int, dict]:
    '''Group body positions by id across frames.'''
    tracks: dict[int, dict] = {}
    for frame in frames:
        for body in frame['bodies']:
            track = tracks.setdefault(body['id'], {'kind': body['kind'], 'times': [], 'heights': []})
            track['times'].append(frame['time'])
            track['heights'].append(body['position'][1])
    return tracks


def plotEnergyHistory(exporter: FrameExporter) -> go.Figure:
    '''
    Fluid kinetic energy and largest particle speed over time.

    Parameters:
    -----------
    exporter : FrameExporter
        Exporter holding the recorded frames

    Returns:
    --------
    go.Figure : Plotly figure with two stacked subplots
    '''
    history = exporter.energyHistory
    times = [frame['time'] for frame in exporter.frames]
    maxSpeeds = [max(frame['speeds'], default=0.0) for frame in exporter.frames]

    fig = make_subplots(
        rows=2, cols=1, shared_xaxes=True,
        subplot_titles=('Kinetic Energy', 'Max Particle Speed'),
    )

    fig.add_trace(
        go.Scatter(x=history['times'], y=history['kinetic'], mode='lines', name='KE',
                   line=dict(color=theme.KINETIC_ENERGY, width=2)),
        row=1, col=1,
    )
    fig.add_trace(
        go.Scatter(x=times, y=maxSpeeds, mode='lines', name='max |v|',
                   line=dict(color=theme.MAX_SPEED, width=2)),
        row=2, col=1,
    )

    fig.update_yaxes(title_text='KE (J)', row=1, col=1)
    fig.update_yaxes(title_text='|v| (m/s)', row=2, col=1)
    fig.update_xaxes(title_text='Time (s)', row=2, col=1)

    fig.update_layout(
        title='Fluid Energy',
        template=theme.TEMPLATE,
        height=theme.ENERGY_HEIGHT,
    )

    return fig


def plotBodyHeights(exporter: FrameExporter, floorHeight: float | None = None) -> go.Figure:
    '''
    Height of every rigid body over time, one line per body.

    Parameters:
    -----------
    exporter : FrameExporter
        Exporter holding the recorded frames
    floorHeight : float | None
        Domain floor to draw as a reference line

    Returns:
    --------
    go.Figure : Plotly figure
    '''
    fig = go.Figure()

    tracks = _bodyTracks(exporter.frames)
    for i, (bodyId, track) in enumerate(sorted(tracks.items())):
        fig.add_trace(go.Scatter(
            x=track['times'], y=track['heights'], mode='lines',
            name=f'#{bodyId} {track["kind"]}',
            line=dict(color=theme.BODY_PALETTE[i % len(theme.BODY_PALETTE)], width=2),
        ))

    if floorHeight is not None:
        fig.add_hline(
            y=floorHeight,
            line=dict(color=theme.FLOOR_LINE, dash='dash', width=1),
            annotation_text='floor',
        )

    fig.update_layout(
        title='Rigid Body Heights',
        xaxis_title='Time (s)',
        yaxis_title='y',
        template=theme.TEMPLATE,
        height=theme.BODY_HEIGHT,
    )

    return fig


def writeDiagnosticsReport(
    exporter: FrameExporter,
    params: SimulationParameters,
    outputDir: str,
    scenarioName: str = 'dropTank',
) -> str:
    '''
    Write the energy and body height plots to a standalone HTML file.

    Parameters:
    -----------
    exporter : FrameExporter
        Exporter holding the recorded frames
    params : SimulationParameters
        Configuration of the run (for the floor height)
    outputDir : str
        Output directory path
    scenarioName : str
        Scenario name for the filename

    Returns:
    --------
    str : Path to the HTML report
    '''
    os.makedirs(outputDir, exist_ok=True)
    filepath = os.path.join(outputDir, f'fluidSandbox_{scenarioName}_diagnostics.html')

    energyFig = plotEnergyHistory(exporter)
    bodyFig = plotBodyHeights(exporter, floorHeight=float(np.asarray(params.boundMin)[1]))

    with open(filepath, 'w') as f:
        f.write('<html><head><meta charset="utf-8"></head><body>\n')
        f.write(energyFig.to_html(full_html=False, include_plotlyjs='cdn'))
        f.write(bodyFig.to_html(full_html=False, include_plotlyjs=False))
        f.write('\n</body></html>\n')

    return filepath
