from benchdiff.cli import main

main()
