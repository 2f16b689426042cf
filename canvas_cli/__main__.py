from canvas_cli.cli import main

main()
