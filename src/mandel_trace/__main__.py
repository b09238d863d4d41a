from mandel_trace.main import main

if __name__ == "__main__":
    main()
