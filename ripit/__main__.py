from ripit.cli import main

main()
