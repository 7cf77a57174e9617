from buscat.main import main

main()
