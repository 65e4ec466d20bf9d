# -- Visualization Theme -- #

'''
Dark-mode colors for the sandbox diagnostic plots, named after what
they draw rather than after the hue.
'''

# Plotly template
TEMPLATE = 'plotly_dark'

# Fluid quantities
KINETIC_ENERGY = '#42A5F5'
MAX_SPEED = '#FFA726'

# Domain walls and other reference levels
FLOOR_LINE = '#888888'

# One line color per rigid body, cycled by id order
BODY_PALETTE = ['#EF5350', '#66BB6A', '#AB47BC', '#26C6DA', '#FFEE58', '#8D6E63']

# Figure heights [px]
ENERGY_HEIGHT = 600
BODY_HEIGHT = 400
