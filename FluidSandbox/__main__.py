# -- FluidSandbox CLI -- #

from FluidSandbox.runner import main

main()
