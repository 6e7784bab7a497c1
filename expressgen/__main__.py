from expressgen.cli import main

main()
