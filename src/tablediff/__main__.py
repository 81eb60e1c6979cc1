from tablediff.cli import main

main()
