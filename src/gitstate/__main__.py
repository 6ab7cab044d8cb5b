from gitstate.cli import main

main()
