from tubescout.app.server import main

main()
